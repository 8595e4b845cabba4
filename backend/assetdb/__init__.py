# backend/assetdb/__init__.py
"""
Import ORM models from each app so that Alembic and
Base.metadata.create_all() see every table.

The actual model classes are kept in assetdb/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models          # users / auth
from .apps.masterdata import models as masterdata_models      # departments, locations, employees
from .apps.inventory import models as inventory_models        # products + serials
from .apps.transactions import models as transactions_models  # borrow / return
from .apps.audit import models as audit_models                # change log

__all__ = [
    "accounts_models",
    "masterdata_models",
    "inventory_models",
    "transactions_models",
    "audit_models",
]
