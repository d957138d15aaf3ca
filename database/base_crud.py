"""Generic CRUD helpers shared by every repository.

Each method accepts an optional external ``session``. When one is given
the work joins the caller's unit of work and nothing is committed;
otherwise a private session is opened, committed and closed.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from business.errors import ValidationError
from .connection import DatabaseConnection


class BaseCRUD:
    """Base repository with generic create/read/update/delete operations.

    Attributes:
        conn: Database connection manager.
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def get_by_id(self, model: Type, record_id: int,
                  session: Optional[Session] = None) -> Optional[Any]:
        """Fetch one row by primary key.

        Args:
            model: ORM model class.
            record_id: Primary key value.
            session: External session (optional).

        Returns:
            The ORM object, or None if it does not exist.
        """
        if session:
            return session.get(model, record_id)

        with self._get_session() as sess:
            return sess.get(model, record_id)

    def get_all(self, model: Type, filters: Optional[Dict[str, Any]] = None,
                order_by: Optional[Any] = None, limit: Optional[int] = None,
                session: Optional[Session] = None) -> List[Any]:
        """Fetch rows matching equality filters.

        Args:
            model: ORM model class.
            filters: ``{column_name: value}`` equality filters.
            order_by: Column or list of columns to order by.
            limit: Maximum number of rows.
            session: External session (optional).

        Returns:
            List of ORM objects.
        """
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by is not None:
                if isinstance(order_by, (list, tuple)):
                    query = query.order_by(*order_by)
                else:
                    query = query.order_by(order_by)
            if limit:
                query = query.limit(limit)
            return query.all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def count(self, model: Type, filters: Optional[Dict[str, Any]] = None,
              session: Optional[Session] = None) -> int:
        """Count rows matching equality filters."""
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            return query.count()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def create(self, model: Type, session: Optional[Session] = None,
               **values: Any) -> Any:
        """Insert one row.

        Args:
            model: ORM model class.
            session: External session (optional).
            **values: Column values.

        Returns:
            The created ORM object with its generated primary key.
        """
        def _do(sess):
            obj = model(**values)
            sess.add(obj)
            sess.flush()
            return obj

        if session:
            return _do(session)

        with self._get_session() as sess:
            obj = _do(sess)
            sess.commit()
            sess.refresh(obj)
            return obj

    def update_by_id(self, model: Type, record_id: int,
                     session: Optional[Session] = None,
                     **values: Any) -> Optional[Any]:
        """Update one row by primary key.

        Args:
            model: ORM model class.
            record_id: Primary key value.
            session: External session (optional).
            **values: Column values to set.

        Returns:
            The updated ORM object, or None if it does not exist.
        """
        def _do(sess):
            obj = sess.get(model, record_id)
            if obj is None:
                return None
            for key, value in values.items():
                setattr(obj, key, value)
            sess.flush()
            return obj

        if session:
            return _do(session)

        with self._get_session() as sess:
            obj = _do(sess)
            if obj is None:
                return None
            sess.commit()
            sess.refresh(obj)
            return obj

    def delete_by_id(self, model: Type, record_id: int,
                     session: Optional[Session] = None) -> bool:
        """Delete one row by primary key.

        Returns:
            True if a row was deleted, False if it did not exist.
        """
        def _do(sess):
            obj = sess.get(model, record_id)
            if obj is None:
                return False
            sess.delete(obj)
            sess.flush()
            return True

        if session:
            return _do(session)

        with self._get_session() as sess:
            deleted = _do(sess)
            if deleted:
                sess.commit()
            return deleted

    @staticmethod
    def _parse_date(date_value: Any, field_name: str = "Date") -> date:
        """Parse a ``date`` or ``YYYY-MM-DD`` string.

        Raises:
            ValidationError: Missing value or invalid format.
        """
        if isinstance(date_value, datetime):
            return date_value.date()
        if isinstance(date_value, date):
            return date_value
        if isinstance(date_value, str) and date_value:
            try:
                return datetime.strptime(date_value[:10], "%Y-%m-%d").date()
            except ValueError:
                raise ValidationError(
                    f"Invalid date format: {date_value}, expected YYYY-MM-DD"
                )
        raise ValidationError(f"{field_name} is required")

    @staticmethod
    def _parse_datetime(value: Any, field_name: str = "Datetime") -> datetime:
        """Parse a ``datetime`` or ISO-8601 string into a naive local datetime.

        Raises:
            ValidationError: Missing value or invalid format.
        """
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str) and value:
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                raise ValidationError(
                    f"Invalid datetime format: {value}, expected ISO-8601"
                )
        else:
            raise ValidationError(f"{field_name} is required")

        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed
