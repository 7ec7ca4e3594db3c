"""
Declarative base shared by every ORM model.
Alembic reads Base.metadata (after importing lacr.models) to build migrations.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
