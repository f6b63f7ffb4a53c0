# backend/ojtdb/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- The package exposes a clear surface.

The actual model classes are kept in ojtdb/apps/*/models.py.
"""

from .apps.library import models as library_models        # departments / roles / tasks / topics
from .apps.training import models as training_models      # trainees + daily sessions
from .apps.plans import models as plans_models            # 4-day plans + knowledge ledger
from .apps.audit import models as audit_models            # append-only audit trail

__all__ = [
    "library_models",
    "training_models",
    "plans_models",
    "audit_models",
]
