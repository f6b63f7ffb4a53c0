from __future__ import annotations

from typing import Optional

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session


def conflict_aware_insert(db: Session, table: Table) -> Optional[object]:
    """
    Return an INSERT construct that supports ``on_conflict_do_nothing`` /
    ``on_conflict_do_update`` for the session's dialect, or None when the
    backend has no native upsert we know how to drive.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    return None
