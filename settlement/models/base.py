"""Declarative base shared by the settlement reporting tables."""
from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for settlement ORM models.

    Tables use integer autoincrement keys so "first match" lookups can order by
    insertion.
    """


__all__ = ["Base"]
