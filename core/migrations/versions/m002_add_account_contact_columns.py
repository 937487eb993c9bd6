"""account 연락처 컬럼 추가 (address, phone1, phone2, goodsName)"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration

CONTACT_COLUMNS = ("address", "phone1", "phone2", "goodsName")


async def up(db: SQLiteAdapter) -> None:
    existing = {column["name"] for column in await db.get_table_info("account")}
    for column in CONTACT_COLUMNS:
        if column not in existing:
            await db.execute(f"ALTER TABLE account ADD COLUMN {column} TEXT")


migration = Migration(version=2, name="add_account_contact_columns", up=up)
