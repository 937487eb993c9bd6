"""기본 계정과목 (main head) 생성. 이미 있으면 건너뜀."""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration

DEFAULT_CHART_HEADS: tuple[tuple[str, str], ...] = (
    ("Fixed Asset", "Asset"),
    ("Current Asset", "Asset"),
    ("Fixed Liability", "Liability"),
    ("Current Liability", "Liability"),
    ("Equity", "Equity"),
    ("Revenue", "Revenue"),
    ("Expense", "Expense"),
)


async def up(db: SQLiteAdapter) -> None:
    await db.executemany(
        "INSERT OR IGNORE INTO chart (date, name, type) VALUES (date('now'), ?, ?)",
        list(DEFAULT_CHART_HEADS),
    )


migration = Migration(version=8, name="seed_default_chart_heads", up=up)
