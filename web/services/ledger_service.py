"""
Ledger 서비스

UI/import 도구가 사용하는 경계 파사드.
ChartRepository, PostingEngine, LedgerProjector, BalanceSheetAggregator를 묶어
도메인 예외(LedgerError 하위 타입)만 밖으로 전달.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import BalanceSheetConfig
from core.errors import storage_errors
from core.ledger import (
    Account,
    AccountDraft,
    BalanceSheet,
    BalanceSheetAggregator,
    Chart,
    ChartDraft,
    ChartNode,
    ChartRepository,
    Journal,
    JournalDraft,
    LedgerProjector,
    LedgerRow,
    OpeningBalanceLine,
    PostedJournal,
    PostingEngine,
)
from core.migrations import MigrationRunner, build_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerStatement:
    """계정 원장 조회 결과"""

    account: Account
    start: date | None
    end: date | None
    opening_balance: Decimal
    rows: list[LedgerRow]
    closing_balance: Decimal


class LedgerService:
    """Ledger 서비스

    Args:
        db: SQLite 어댑터
        balance_sheet_config: 재무상태표 분류 설정 (None이면 기본값)
    """

    def __init__(self, db: SQLiteAdapter, balance_sheet_config: BalanceSheetConfig | None = None):
        self.db = db
        config = balance_sheet_config or BalanceSheetConfig()
        self.charts = ChartRepository(db)
        self.posting = PostingEngine(db)
        self.projector = LedgerProjector(db)
        self.aggregator = BalanceSheetAggregator(
            db,
            fixed_heads=config.fixed_heads,
            fixed_keywords=config.fixed_keywords,
        )

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_account(self, account_id: int) -> Account:
        """계정 조회"""
        return await self.charts.get_account(account_id)

    async def list_charts_with_accounts(self) -> list[ChartNode]:
        """계정과목 트리 조회"""
        return await self.charts.list_charts_with_accounts()

    async def get_ledger(
        self,
        account_id: int,
        start: date | str | None = None,
        end: date | str | None = None,
    ) -> LedgerStatement:
        """계정 원장 조회

        Raises:
            NotFoundError: 계정이 없는 경우
            ValidationError: 날짜 형식/범위 오류
        """
        projection = self.projector.project(account_id, start, end)

        async with self.db.snapshot():
            account = await self.charts.get_account(account_id)
            opening = await projection.opening_balance()
            rows = await projection.to_list()

        return LedgerStatement(
            account=account,
            start=projection.start,
            end=projection.end,
            opening_balance=opening,
            rows=rows,
            closing_balance=rows[-1].balance if rows else opening,
        )

    async def get_balance_sheet(self, as_of: date | str | None = None) -> BalanceSheet:
        """재무상태표 조회

        Raises:
            IntegrityError: 항등식 불일치
        """
        return await self.aggregator.build(as_of)

    async def get_journal(self, journal_id: int) -> Journal:
        """분개 조회"""
        return await self.posting.get_journal(journal_id)

    async def schema_version(self) -> int:
        """현재 스키마 버전"""
        with storage_errors("schema_version"):
            return await MigrationRunner(self.db, build_registry()).current_version()

    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------

    async def post_journal(self, draft: JournalDraft) -> PostedJournal:
        """분개 전기 (검증 실패 시 ValidationError, 아무것도 쓰지 않음)"""
        return await self.posting.post(draft)

    async def save_draft(self, draft: JournalDraft) -> Journal:
        """분개 초안 저장"""
        return await self.posting.save_draft(draft)

    async def reverse_journal(
        self,
        journal_id: int,
        reversal_date: date | str,
        narration: str | None = None,
    ) -> PostedJournal:
        """반대 분개 전기"""
        return await self.posting.reverse(journal_id, reversal_date, narration)

    async def import_charts_and_accounts(
        self,
        charts: Sequence[ChartDraft],
        accounts: Sequence[AccountDraft],
    ) -> tuple[list[Chart], list[Account]]:
        """계정과목/계정 일괄 입력 (수동 입력과 같은 검증)"""
        return await self.charts.bulk_insert(charts, accounts)

    async def import_opening_balances(self, lines: Sequence[OpeningBalanceLine]) -> list[Account]:
        """기초 재무상태표 입력"""
        return await self.aggregator.import_opening_balances(lines)
