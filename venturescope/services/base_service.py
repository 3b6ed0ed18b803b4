"""Session handling shared by the tenant services."""

from __future__ import annotations

from sqlalchemy.orm import Session

from venturescope.database import db as db_module


class BaseService:
    """Services share one session per request or task; callers own its lifetime."""

    def __init__(self, db: Session | None = None) -> None:
        self.db = db if db is not None else db_module.SessionLocal()

    def commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()
