"""Declarative base for Easel models."""

from advanced_alchemy.base import BigIntAuditBase


class Base(BigIntAuditBase):
    """Base class for all Easel models.

    Rows get an auto-incrementing big-int ``id`` plus ``created_at`` and
    ``updated_at`` audit columns.
    """

    __abstract__ = True
