"""SQLAlchemy declarative Base shared by users and profile update requests."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
