"""SQLAlchemy adapter package for mergipy."""

from __future__ import annotations

from .relationships import reconcile_relationship

__all__ = ["reconcile_relationship"]
