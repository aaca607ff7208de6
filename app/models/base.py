"""SQLAlchemy declarative Base shared by the user and role/permission models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Base.metadata holds every authorization table."""
