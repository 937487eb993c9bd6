"""account 활성 여부 컬럼 (비활성 계정에는 전기 불가)"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration


async def up(db: SQLiteAdapter) -> None:
    await db.execute("ALTER TABLE account ADD COLUMN isActive BOOLEAN NOT NULL DEFAULT 1")


migration = Migration(version=5, name="add_is_active_to_account", up=up)
