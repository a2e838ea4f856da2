"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from lineage_explorer.api import app

    uvicorn lineage_explorer.api:app --reload
"""

from lineage_explorer.api.app import app

__all__ = ["app"]
