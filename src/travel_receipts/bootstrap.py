from __future__ import annotations

import travel_receipts.models  # noqa: F401
from travel_receipts.core.config import settings
from travel_receipts.core.db import engine
from travel_receipts.core.models import Base


def bootstrap() -> None:
    # Postgres and other servers are migrated with alembic.
    if str(settings.database_url).startswith("sqlite"):
        Base.metadata.create_all(engine)
