"""
account 테이블 재작성

code 컬럼을 INTEGER → VARCHAR(40)로 변경 (영문/숫자 혼합 코드 허용).
기존 숫자 코드는 문자열로 변환, NULL은 유지.
"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration
from core.migrations.rewrite import rebuild_table

CREATE_ACCOUNT_SQL = """
    CREATE TABLE {table} (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        chartId   INTEGER NOT NULL REFERENCES chart(id),
        date      TEXT,
        name      TEXT NOT NULL,
        code      VARCHAR(40) NULL,
        createdAt TEXT,
        updatedAt TEXT,
        address   TEXT,
        phone1    TEXT,
        phone2    TEXT,
        goodsName TEXT
    )
"""

COLUMNS = [
    "id", "chartId", "date", "name", "code",
    "createdAt", "updatedAt", "address", "phone1", "phone2", "goodsName",
]


async def up(db: SQLiteAdapter) -> None:
    select_exprs = [
        "CAST(code AS TEXT)" if column == "code" else column for column in COLUMNS
    ]
    await rebuild_table(db, "account", CREATE_ACCOUNT_SQL, COLUMNS, select_exprs)


migration = Migration(
    version=3,
    name="rebuild_account_code_as_text",
    up=up,
    rebuilds_tables=True,
)
