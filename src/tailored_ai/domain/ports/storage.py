"""Port: key-value storage backing the repository cache."""

from __future__ import annotations

from typing import Protocol


class KeyValueStorage(Protocol):
    """String key to string value store."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
