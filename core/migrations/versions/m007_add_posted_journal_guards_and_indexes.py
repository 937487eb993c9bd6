"""
전기 완료 분개 보호 트리거 + 조회 인덱스

isPosted = 1인 journal은 date/narration/isPosted 변경과 삭제를,
그 journal_items는 금액/계정/소속 변경과 삭제를 저장소 수준에서 거부.
updatedAt만 바꾸는 타임스탬프 트리거는 영향받지 않음.
"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.migrations.registry import Migration

GUARD_TRIGGERS = (
    """
    CREATE TRIGGER IF NOT EXISTS before_update_posted_journal
    BEFORE UPDATE OF date, narration, isPosted ON journal
    WHEN OLD.isPosted = 1
        AND (NEW.date IS NOT OLD.date
             OR NEW.narration IS NOT OLD.narration
             OR NEW.isPosted IS NOT OLD.isPosted)
    BEGIN
        SELECT RAISE(ABORT, 'posted journal is immutable');
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS before_delete_posted_journal
    BEFORE DELETE ON journal
    WHEN OLD.isPosted = 1
    BEGIN
        SELECT RAISE(ABORT, 'posted journal is immutable');
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS before_update_posted_journal_items
    BEFORE UPDATE OF journalId, accountId, debitAmount, creditAmount ON journal_items
    WHEN (SELECT isPosted FROM journal WHERE id = OLD.journalId) = 1
    BEGIN
        SELECT RAISE(ABORT, 'posted journal is immutable');
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS before_delete_posted_journal_items
    BEFORE DELETE ON journal_items
    WHEN (SELECT isPosted FROM journal WHERE id = OLD.journalId) = 1
    BEGIN
        SELECT RAISE(ABORT, 'posted journal is immutable');
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS before_insert_posted_journal_items
    BEFORE INSERT ON journal_items
    WHEN (SELECT isPosted FROM journal WHERE id = NEW.journalId) = 1
    BEGIN
        SELECT RAISE(ABORT, 'posted journal is immutable');
    END
    """,
)

INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_journal_items_account ON journal_items (accountId, journalId)",
    "CREATE INDEX IF NOT EXISTS idx_journal_items_journal ON journal_items (journalId)",
    "CREATE INDEX IF NOT EXISTS idx_journal_date ON journal (date, id)",
    "CREATE INDEX IF NOT EXISTS idx_chart_parent ON chart (parentId)",
    "CREATE INDEX IF NOT EXISTS idx_account_chart ON account (chartId)",
)


async def up(db: SQLiteAdapter) -> None:
    for sql in GUARD_TRIGGERS + INDEXES:
        await db.execute(sql)


migration = Migration(version=7, name="add_posted_journal_guards_and_indexes", up=up)
