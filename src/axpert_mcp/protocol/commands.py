"""Command templates: the request half of a device operation.

A template is the human-readable ASCII command with at most one ``{input}``
placeholder, plus an optional rule the substituted value must satisfy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from ..exceptions import InvalidArgumentError
from .framing import TERMINATOR, Frame, build_frame

PLACEHOLDER = "{INPUT}"


def _normalize_rule(
    rule: Iterable[str] | str | re.Pattern | None,
) -> frozenset | re.Pattern | None:
    if rule is None:
        return None
    if isinstance(rule, re.Pattern):
        return rule
    if isinstance(rule, str):
        return re.compile(rule)
    values = frozenset(str(v) for v in rule)
    if not values:
        raise ValueError("An enumerated input rule needs at least one value")
    return values


@dataclass(frozen=True)
class CommandTemplate:
    """An immutable description of one device request.

    Args:
        text: ASCII command, e.g. ``"QPIGS"`` or ``"POP{input}"``. Upper-cased
            and stripped once at construction.
        input_rule: Either a collection of accepted values or a regular
            expression (string or compiled) the whole value must match.
        formatter: Converts the caller's argument into placeholder text
            before the rule is checked, e.g. ``50 -> "50"``.
        default: Argument used when the caller supplies none.
    """

    text: str
    input_rule: Any = None
    formatter: Callable[[Any], str] | None = None
    default: Any = None

    def __post_init__(self) -> None:
        text = str(self.text).strip().upper()
        count = text.count(PLACEHOLDER)
        if count > 1:
            raise ValueError(f"Command {text!r} has more than one placeholder")
        if count == 0 and (self.input_rule is not None or self.default is not None):
            raise ValueError(f"Command {text!r} takes no input but declares an input rule")
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "input_rule", _normalize_rule(self.input_rule))

    @property
    def takes_input(self) -> bool:
        return PLACEHOLDER in self.text

    def build(self, arg: Any = None) -> str:
        """Produce the request payload for ``arg``.

        Raises:
            InvalidArgumentError: If ``arg`` is given to a command without a
                placeholder, missing for one with a placeholder, cannot be
                formatted, or does not satisfy the input rule.
        """
        if not self.takes_input:
            if arg is not None:
                raise InvalidArgumentError(
                    f"{self.text} takes no input, got {arg!r}"
                )
            return self.text

        if arg is None:
            arg = self.default
        if arg is None:
            raise InvalidArgumentError(f"{self.text} requires an input value")

        value = self._format(arg)
        self._validate(value)
        return self.text.replace(PLACEHOLDER, value)

    def build_frame(self, arg: Any = None, terminator: bytes = TERMINATOR) -> Frame:
        """Build the outgoing frame for ``arg``."""
        payload = self.build(arg)
        # Encoding also rejects non-ASCII input before anything is written.
        build_frame(payload, terminator)
        return Frame(payload=payload, terminator=terminator)

    def _format(self, arg: Any) -> str:
        if self.formatter is None:
            return str(arg)
        try:
            return self.formatter(arg)
        except (ValueError, TypeError, KeyError) as e:
            raise InvalidArgumentError(
                f"{arg!r} is not valid input for {self.text}: {e}"
            ) from e

    def _validate(self, value: str) -> None:
        rule = self.input_rule
        if rule is None:
            return
        if isinstance(rule, frozenset):
            if value not in rule:
                raise InvalidArgumentError(
                    f"{value!r} is not accepted input for {self.text} "
                    f"(valid input: {sorted(rule)})"
                )
        elif rule.fullmatch(value) is None:
            raise InvalidArgumentError(
                f"{value!r} is not accepted input for {self.text} "
                f"(must match {rule.pattern!r})"
            )

    def __str__(self) -> str:
        return self.text
