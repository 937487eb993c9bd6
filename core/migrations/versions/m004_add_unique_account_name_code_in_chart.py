"""같은 chart 안에서 (name, code) 중복 방지 인덱스"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration


async def up(db: SQLiteAdapter) -> None:
    await db.execute(
        """
        CREATE UNIQUE INDEX IF NOT EXISTS idx_account_chart_name_code
        ON account (chartId, name, code)
        """
    )


migration = Migration(version=4, name="add_unique_account_name_code_in_chart", up=up)
