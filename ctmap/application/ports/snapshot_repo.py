"""Port interface for the durable snapshot slot."""

from abc import ABC, abstractmethod
from typing import Any


class SnapshotRepository(ABC):
    @abstractmethod
    async def load(self, key: str) -> dict[str, Any] | None:
        """Return the stored snapshot object, or None if the key is absent."""
        ...

    @abstractmethod
    async def save(self, key: str, version: int, payload: dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...
