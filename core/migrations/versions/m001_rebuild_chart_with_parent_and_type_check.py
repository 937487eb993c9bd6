"""
chart 테이블 재작성

- type CHECK를 5대 계정 유형으로 제한 (대소문자가 다른 기존 값은 정규화)
- parentId 추가 (main head → sub-head 트리)
- UNIQUE(name) → UNIQUE(type, name)
"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration
from core.migrations.rewrite import rebuild_table

CREATE_CHART_SQL = """
    CREATE TABLE {table} (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        date      TEXT,
        name      TEXT NOT NULL,
        type      TEXT NOT NULL
                  CHECK(type IN ('Asset', 'Liability', 'Equity', 'Revenue', 'Expense')),
        parentId  INTEGER NULL REFERENCES chart(id),
        createdAt TEXT,
        updatedAt TEXT,
        UNIQUE(type, name),
        CHECK(parentId IS NULL OR parentId <> id)
    )
"""

NORMALIZED_TYPE = """
    CASE lower(trim(type))
        WHEN 'asset' THEN 'Asset'
        WHEN 'liability' THEN 'Liability'
        WHEN 'equity' THEN 'Equity'
        WHEN 'revenue' THEN 'Revenue'
        WHEN 'expense' THEN 'Expense'
        ELSE type
    END
"""


async def up(db: SQLiteAdapter) -> None:
    await rebuild_table(
        db,
        "chart",
        CREATE_CHART_SQL,
        columns=["id", "date", "name", "type", "createdAt", "updatedAt"],
        select_exprs=["id", "date", "name", NORMALIZED_TYPE, "createdAt", "updatedAt"],
    )


migration = Migration(
    version=1,
    name="rebuild_chart_with_parent_and_type_check",
    up=up,
    rebuilds_tables=True,
)
