"""Transaction boundary shared by the identity provider and the SQL store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self


class UnitOfWork(ABC):
    """
    One use-case step, one transaction.

    Leaving the ``with`` block normally commits; leaving it with an exception
    rolls back and lets the exception propagate. Subclasses expose the
    repositories bound to the transaction (``users``, ``refresh_tokens``).
    """

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
