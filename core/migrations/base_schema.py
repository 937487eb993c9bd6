"""
기준 스키마

마이그레이션 이전 상태의 테이블과 타임스탬프 트리거.
CREATE IF NOT EXISTS 패턴으로 이미 존재하는 DB에서는 아무것도 바꾸지 않음.

chart.type CHECK가 느슨하고 account.code가 INTEGER인 초기 형태이며,
이후 구조 변경은 모두 versions/ 아래 마이그레이션으로만 수행.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


MIGRATIONS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS migrations (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        version    INTEGER NOT NULL UNIQUE,
        name       TEXT NOT NULL UNIQUE,
        applied_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
"""

BASE_TABLES_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS chart (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        date      TEXT,
        name      TEXT NOT NULL UNIQUE,
        type      TEXT NOT NULL CHECK(length(type) > 0),
        createdAt TEXT,
        updatedAt TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS account (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        chartId   INTEGER NOT NULL REFERENCES chart(id),
        date      TEXT,
        name      TEXT NOT NULL,
        code      INTEGER,
        createdAt TEXT,
        updatedAt TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS journal (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        date      TEXT NOT NULL,
        narration TEXT,
        isPosted  INTEGER NOT NULL DEFAULT 0 CHECK(isPosted IN (0, 1)),
        createdAt TEXT,
        updatedAt TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS journal_items (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        journalId    INTEGER NOT NULL REFERENCES journal(id) ON DELETE CASCADE,
        accountId    INTEGER NOT NULL REFERENCES account(id),
        debitAmount  TEXT NOT NULL DEFAULT '0',
        creditAmount TEXT NOT NULL DEFAULT '0',
        createdAt    TEXT,
        updatedAt    TEXT
    )
    """,
)

TIMESTAMPED_TABLES: tuple[str, ...] = ("chart", "account", "journal", "journal_items")


def timestamp_trigger_sql(table: str) -> list[str]:
    """createdAt/updatedAt 자동 기록 트리거 DDL

    updatedAt만 다시 쓰는 UPDATE는 재귀 트리거가 꺼져 있어 반복되지 않음.

    Args:
        table: 테이블 이름

    Returns:
        [insert 트리거, update 트리거] CREATE 문
    """
    return [
        f"""
        CREATE TRIGGER IF NOT EXISTS after_insert_{table}_add_timestamp
        AFTER INSERT ON {table}
        BEGIN
            UPDATE {table}
            SET createdAt = datetime('now'), updatedAt = datetime('now')
            WHERE id = NEW.id;
        END
        """,
        f"""
        CREATE TRIGGER IF NOT EXISTS after_update_{table}_add_timestamp
        AFTER UPDATE ON {table}
        BEGIN
            UPDATE {table}
            SET updatedAt = datetime('now')
            WHERE id = NEW.id;
        END
        """,
    ]


async def ensure_migrations_table(db: "SQLiteAdapter") -> None:
    """migrations 테이블 생성 (없으면)"""
    await db.execute(MIGRATIONS_TABLE_SQL)


async def ensure_base_schema(db: "SQLiteAdapter") -> None:
    """기준 테이블과 타임스탬프 트리거 생성

    호출자가 연 트랜잭션 안에서 실행되어야 함.

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await ensure_migrations_table(db)

    for sql in BASE_TABLES_SQL:
        await db.execute(sql)

    for table in TIMESTAMPED_TABLES:
        for sql in timestamp_trigger_sql(table):
            await db.execute(sql)

    logger.debug("기준 스키마 확인 완료")
