"""
BaseService -- shared plumbing for the ledger write services.

Services run inside the caller's transaction.  They flush, open SAVEPOINTs
and take row locks, but commit and rollback of the outer transaction belong
to whoever opened it (``session_scope()``, a request handler, a test).
"""

from abc import ABC
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Base class for services that own one aggregate table.

    Subclasses set ``model`` to the ORM class whose rows they lock.
    """

    model: ClassVar[type[Base]]

    def __init__(self, session: Session):
        self.session = session

    def _lock_row(self, row_id: Any) -> ModelType | None:
        """
        SELECT ... FOR UPDATE on one row of ``model``, refreshing any copy
        already in the identity map.  Returns None when the id is unknown.

        SQLite ignores FOR UPDATE; writers there are serialized by the
        BEGIN IMMEDIATE issued when the transaction starts.
        """
        return self.session.execute(
            select(self.model)
            .where(self.model.id == row_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
