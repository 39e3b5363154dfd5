"""Voltronic / Axpert hybrid inverter RS232 protocol, exposed over MCP."""

__version__ = "0.1.0"
