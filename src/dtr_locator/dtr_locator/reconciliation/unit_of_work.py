from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Callable, Protocol

from ..locators.repository import LocatorRepository, SequenceRepository
from ..punches.repository import PunchRepository


class UnitOfWork(Protocol):
    """One database transaction shared by every write of a reconciliation.

    Used as a context manager: leaving the block without `commit()` rolls
    everything back.
    """

    locators: LocatorRepository
    sequences: SequenceRepository
    punches: PunchRepository

    def __enter__(self) -> "UnitOfWork":
        raise NotImplementedError

    def __exit__(self, exc_type, exc, tb) -> None:
        raise NotImplementedError

    def savepoint(self, name: str) -> AbstractContextManager[None]:
        """Nested scope; an exception inside undoes only the scope's writes."""

        raise NotImplementedError

    def commit(self) -> None:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], UnitOfWork]
