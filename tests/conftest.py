"""Shared test helpers."""

from __future__ import annotations

from typing import Iterable, Optional

import pytest

from axpert_mcp.protocol.framing import build_frame


class FakeTransport:
    """In-memory transport that replays scripted response bytes.

    ``None`` entries in ``script`` simulate polls with no byte available.
    Once the script is exhausted every poll returns ``None``.
    """

    def __init__(self, script: Iterable[Optional[int]] = ()) -> None:
        self._script = list(script)
        self.written = b""
        self.polls = 0

    @classmethod
    def replying(cls, payload: str, gaps: int = 0) -> FakeTransport:
        return cls([None] * gaps + list(build_frame(payload)))

    def write(self, data: bytes) -> int:
        self.written += data
        return len(data)

    def read_one_or_none(self) -> Optional[int]:
        self.polls += 1
        if not self._script:
            return None
        return self._script.pop(0)


@pytest.fixture
def transport_for():
    """Build a transport that answers with a correctly framed ``payload``."""
    return FakeTransport.replying
