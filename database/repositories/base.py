from typing import Any, List, Optional

from sqlalchemy import Select
from sqlalchemy.orm import Session


class BaseRepository:
    """Session holder for one unit of work. The caller owns commit and rollback."""

    def __init__(self, db: Session):
        self.db = db

    def scalar_or_none(self, stmt: Select) -> Optional[Any]:
        return self.db.execute(stmt).scalar_one_or_none()

    def scalars(self, stmt: Select) -> List[Any]:
        return list(self.db.execute(stmt).scalars().all())

    def flush(self) -> None:
        self.db.flush()
