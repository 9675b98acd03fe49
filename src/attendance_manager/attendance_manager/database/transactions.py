from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol


class TransactionManager(Protocol):
    """What services need to group several repository calls into one commit.

    :class:`~.connection.DatabaseConnection` satisfies it for MySQL.
    """

    def transaction(self) -> ContextManager[None]:
        raise NotImplementedError


class NoTransaction:
    """Stand-in for stores where every call already applies on its own."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield
