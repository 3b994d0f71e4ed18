"""
Alembic model import hook.

Importing this module ensures all SQLAlchemy models are registered on Base.metadata.
"""

from __future__ import annotations

from travel_receipts.modules.evaluation.models import EvalRun  # noqa: F401
