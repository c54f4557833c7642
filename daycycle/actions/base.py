from __future__ import annotations

from typing import Protocol


class Action(Protocol):
    kind: str

    def __call__(self) -> None:
        ...
