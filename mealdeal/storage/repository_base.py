"""Repository base interface."""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class RepositoryBase(ABC, Generic[T]):
    """Read-by-id and create operations shared by every repository.

    Offers are append-only, so update and delete live only on the
    repositories whose entities actually change.
    """

    @abstractmethod
    async def get_by_id(self, id: int) -> Optional[T]:
        """Retrieve entity by ID."""
        pass

    @abstractmethod
    async def create(self, *args: Any, **kwargs: Any) -> T:
        """Create new entity."""
        pass
