"""Context threaded through the pipeline, and the group shape it produces."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any


class InvocationContext(Mapping[str, Any]):
    """
    Accumulating, read-only mapping built up across pipeline stages.

    Each stage returns a delta of *new* keys; ``merge`` produces the next
    context and refuses to overwrite a key an earlier stage already wrote.
    A fresh context is created per invocation and dropped afterwards.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self._data: dict[str, Any] = {**(data or {}), **fields}

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"InvocationContext({sorted(self._data)})"

    def merge(self, delta: Mapping[str, Any]) -> InvocationContext:
        clash = self._data.keys() & delta.keys()
        if clash:
            raise ValueError(f"Stage tried to overwrite context keys: {sorted(clash)}")
        return InvocationContext({**self._data, **delta})


@dataclass(frozen=True)
class NormalizedGroup:
    """Minimal group record exposed to the rule's caller."""

    id: str | None
    """Directory object id; None when the raw record had no id."""

    name: str | None
    """Directory display name; None when the raw record had no displayName."""

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {"id": self.id, "name": self.name}
