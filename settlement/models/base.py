"""
Declarative base for settlement models.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all settlement ORM models."""
