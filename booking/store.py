"""
Storage collaborator for the booking core.

Thin find/count/insert/update layer over the SQLAlchemy session. Every
method converts driver errors into PersistenceError after rolling the
session back. Only a unique violation on write becomes Conflict; foreign
key, check and not-null violations are storage failures.
"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from booking.errors import Conflict, PersistenceError
from models import db

logger = logging.getLogger(__name__)

# SQLSTATE unique_violation; SQLite only reports it in the message
_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == _UNIQUE_VIOLATION
    return str(orig).startswith("UNIQUE constraint failed")


class Store:
    def __init__(self, session=None):
        self.session = session or db.session

    # ── Reads ────────────────────────────────────────────────────────────────

    def find_one(self, model, *criteria, options=()):
        try:
            return self.session.query(model).options(*options).filter(*criteria).first()
        except SQLAlchemyError as exc:
            self._fail(f"Failed to read {model.__tablename__}", exc)

    def find_many(self, model, *criteria, order_by=None, options=()):
        try:
            q = self.session.query(model).options(*options).filter(*criteria)
            if order_by is not None:
                q = q.order_by(*order_by) if isinstance(order_by, (list, tuple)) else q.order_by(order_by)
            return q.all()
        except SQLAlchemyError as exc:
            self._fail(f"Failed to read {model.__tablename__}", exc)

    def count(self, model, *criteria) -> int:
        try:
            return self.session.query(model).filter(*criteria).count()
        except SQLAlchemyError as exc:
            self._fail(f"Failed to count {model.__tablename__}", exc)

    # ── Writes ───────────────────────────────────────────────────────────────

    def insert_one(self, model, values: dict, commit: bool = True):
        rows = self.insert_many(model, [values], commit=commit)
        return rows[0] if rows else None

    def insert_many(self, model, values: list, commit: bool = True) -> list:
        """Insert every row in one flush; either all rows land or none do."""
        rows = [model(**v) for v in values]
        try:
            self.session.add_all(rows)
            self.session.flush()
            if commit:
                self.session.commit()
        except IntegrityError as exc:
            self._integrity_fail(f"Insert into {model.__tablename__}", exc)
        except SQLAlchemyError as exc:
            self._fail(f"Failed to insert into {model.__tablename__}", exc)
        return rows

    def update(self, model, *criteria, patch: dict, commit: bool = True) -> list:
        """Apply patch to every row matching criteria and return those rows."""
        try:
            rows = self.session.query(model).filter(*criteria).all()
            for row in rows:
                for key, value in patch.items():
                    setattr(row, key, value)
            self.session.flush()
            if commit:
                self.session.commit()
        except IntegrityError as exc:
            self._integrity_fail(f"Update of {model.__tablename__}", exc)
        except SQLAlchemyError as exc:
            self._fail(f"Failed to update {model.__tablename__}", exc)
        return rows

    def commit(self):
        try:
            self.session.commit()
        except IntegrityError as exc:
            self._integrity_fail("Write", exc)
        except SQLAlchemyError as exc:
            self._fail("Failed to commit", exc)

    def rollback(self):
        self.session.rollback()

    def _integrity_fail(self, action: str, exc: IntegrityError):
        if not is_unique_violation(exc):
            self._fail(f"{action} violates a storage constraint", exc)
        self.session.rollback()
        logger.warning("Unique violation: %s: %s", action, exc.orig)
        raise Conflict(f"{action} conflicts with an existing row")

    def _fail(self, message: str, exc: Exception):
        self.session.rollback()
        logger.error("%s: %s", message, exc)
        raise PersistenceError(message, details={"reason": str(exc)}) from exc
