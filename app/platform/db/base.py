from datetime import datetime, timezone

import sqlalchemy
from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base
from uuid_extension import uuid7

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    # UUIDv7 sorts by creation time, which keeps ties on created_at stable
    return str(uuid7())


class BaseModel(Base):
    """Owned rows: time-ordered string id plus creation/update stamps."""

    __abstract__ = True

    id = Column(String, primary_key=True, default=new_id, index=True)
    created_at = Column(sqlalchemy.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(sqlalchemy.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"


# Models import Base from here; alembic/env.py imports the models.
