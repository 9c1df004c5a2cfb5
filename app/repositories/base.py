import logging
from contextlib import contextmanager
from typing import Any, Generic, Iterable, List, Mapping, Optional, Type, TypeVar

from sqlalchemy import update
from sqlmodel import Session, SQLModel, select

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


@contextmanager
def unit_of_work(session: Session):
    """Commit everything written inside the block, or roll all of it back."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


class SQLModelRepository(Generic[ModelT]):
    """Minimal persistence interface for one table.

    Repositories only flush; committing is the caller's unit of work.
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def insert(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        self.session.flush()
        self.session.refresh(entity)
        return entity

    def get_by_id(self, entity_id: Any) -> Optional[ModelT]:
        # Always reload so a conditional write made elsewhere is observed
        return self.session.get(self.model, entity_id, populate_existing=True)

    def query(
        self,
        conditions: Iterable[Any] = (),
        order_by: Iterable[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelT]:
        statement = select(self.model)

        for condition in conditions:
            statement = statement.where(condition)

        statement = statement.order_by(*order_by)

        if offset:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)

        return list(self.session.exec(statement).all())

    def update_where(
        self,
        entity_id: Any,
        expected_status: Optional[Any],
        patch: Mapping[str, Any],
    ) -> bool:
        """Apply ``patch`` only if the row still has ``expected_status``.

        Returns False when no row matched, meaning the record is gone or
        another writer moved its status first.
        """
        statement = update(self.model).where(self.model.id == entity_id)

        if expected_status is not None:
            statement = statement.where(self.model.status == expected_status)

        result = self.session.connection().execute(statement.values(**patch))
        matched = result.rowcount == 1

        if not matched:
            logger.debug(
                "Conditional update on %s %s matched no row (expected %s)",
                self.model.__tablename__, entity_id, expected_status,
            )

        return matched

    def delete(self, entity: ModelT) -> None:
        self.session.delete(entity)
        self.session.flush()
