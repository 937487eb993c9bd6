"""
account 기초 잔액 컬럼

차변 - 대변 부호 기준의 소수 문자열 (예: 자산 1000 → '1000.00', 부채 500 → '-500.00').
원장 조회 시 시작 잔액으로 사용.
"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration


async def up(db: SQLiteAdapter) -> None:
    await db.execute("ALTER TABLE account ADD COLUMN openingBalance TEXT NOT NULL DEFAULT '0'")


migration = Migration(version=6, name="add_opening_balance_to_account", up=up)
