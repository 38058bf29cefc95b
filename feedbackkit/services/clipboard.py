"""Clipboard capability used by the copy-reference action."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


class MemoryClipboard:
    """Keeps the last copied text in memory."""

    def __init__(self) -> None:
        self.contents: str | None = None

    def copy(self, text: str) -> None:
        self.contents = text
