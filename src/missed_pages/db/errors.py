"""Storage exceptions raised by the ledger.

A missing row is never an error here: ``count_where`` returns ``0`` and the
report queries return ``[]``. Only an unreachable or failing SQLite database
raises, always as a :class:`StorageUnavailable` subclass. The API turns those
into 503 responses and the not-found hook logs them and carries on.

Reads and writes raise different subclasses because they fail differently in
practice: a write can lose the ``BEGIN IMMEDIATE`` lock race and hit the busy
timeout, a read cannot.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class StorageOperationContext:
    """What the store was doing when it failed.

    Attributes:
        operation: ``"<component>.<method>"``, for example ``"ledger.count_where"``.
        page_title: Canonical key the operation targeted, if any.
        details: Remaining call arguments, for logs.
    """

    operation: str
    page_title: str | None = None
    details: str | None = None

    def describe(self) -> str:
        text = self.operation
        if self.page_title is not None:
            text = f"{text} [{self.page_title}]"
        if self.details:
            text = f"{text}: {self.details}"
        return text


class DatabaseError(RuntimeError):
    """Base exception for DB-layer failures."""


class StorageUnavailable(DatabaseError):
    """The ledger database could not serve a request.

    Args:
        context: The failed operation.
        cause: Underlying driver exception, if there was one.
    """

    def __init__(
        self,
        *,
        context: StorageOperationContext,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(context.describe())
        self.context = context
        self.cause = cause

    @property
    def page_title(self) -> str | None:
        return self.context.page_title


class StorageReadError(StorageUnavailable):
    """A ledger query failed."""


class StorageWriteError(StorageUnavailable):
    """A ledger mutation or its transaction failed."""
