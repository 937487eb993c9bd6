"""
재무상태표 집계

as_of 시점의 계정 잔액을 계정과목 트리 기준으로 자산/부채/자본,
유동(current)/고정(fixed)으로 분류하고 항등식을 검증.

- 금액은 정상 잔액 방향 기준 (자산은 차변 양수, 부채/자본은 대변 양수)
- 묶음 키는 계정이 속한 계정과목 이름 (sub-head면 sub-head 이름)
- 고정 분류: 계정과목 또는 그 main head 이름이 고정 목록에 있거나
  고정 키워드를 포함 (대소문자 무시). 자본은 항상 유동.
- 수익/비용 계정은 나열하지 않고 순액을 자본의 당기순이익 행으로 표시
- assets.total != liabilities.total + equity.total 이면 IntegrityError (자동 보정 없음)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from core.constants import AMOUNT_QUANTUM, ZERO, Defaults
from core.errors import IntegrityError, ValidationError
from core.ledger.amounts import parse_amount, parse_date
from core.ledger.chart_repository import ChartRepository, normalize_code
from core.ledger.models import (
    Account,
    BalanceSheet,
    BalanceSheetLine,
    BalanceSheetSection,
    Chart,
    OpeningBalanceLine,
)
from core.ledger.projector import LedgerProjector
from core.types import BALANCE_SHEET_TYPES, AccountType, NormalSide, SectionType, normal_side

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# 기초 잔액 입력 시 계정과목이 없으면 만들어 둘 기본 main head
DEFAULT_MAIN_HEADS: dict[tuple[AccountType, SectionType], str] = {
    (AccountType.ASSET, SectionType.CURRENT): "Current Asset",
    (AccountType.ASSET, SectionType.FIXED): "Fixed Asset",
    (AccountType.LIABILITY, SectionType.CURRENT): "Current Liability",
    (AccountType.LIABILITY, SectionType.FIXED): "Fixed Liability",
    (AccountType.EQUITY, SectionType.CURRENT): "Equity",
}


class BalanceSheetAggregator:
    """재무상태표 집계기

    Args:
        db: SQLite 어댑터
        fixed_heads: 고정으로 분류할 계정과목 이름
        fixed_keywords: 이름에 포함되면 고정으로 분류할 키워드
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        fixed_heads: Sequence[str] = Defaults.FIXED_HEAD_NAMES,
        fixed_keywords: Sequence[str] = Defaults.FIXED_HEAD_KEYWORDS,
    ):
        self.db = db
        self.charts = ChartRepository(db)
        self.projector = LedgerProjector(db)
        self._fixed_heads = {name.casefold() for name in fixed_heads}
        self._fixed_keywords = tuple(keyword.casefold() for keyword in fixed_keywords)

    def is_fixed_name(self, name: str) -> bool:
        """이름 기준 고정 분류 여부"""
        folded = name.casefold()
        return folded in self._fixed_heads or any(k in folded for k in self._fixed_keywords)

    def classify(self, chart: Chart, main_head: Chart) -> SectionType:
        """계정과목의 유동/고정 분류"""
        if chart.type == AccountType.EQUITY:
            return SectionType.CURRENT
        if self.is_fixed_name(chart.name) or self.is_fixed_name(main_head.name):
            return SectionType.FIXED
        return SectionType.CURRENT

    async def build(self, as_of: date | str | None = None) -> BalanceSheet:
        """재무상태표 생성

        Args:
            as_of: 기준일 (포함, None이면 오늘)

        Returns:
            BalanceSheet

        Raises:
            IntegrityError: 항등식 불일치 (계산된 재무상태표 포함)
        """
        as_of_date = parse_date(as_of, "as_of") if as_of is not None else date.today()

        async with self.db.snapshot():
            charts = {chart.id: chart for chart in await self.charts.list_charts()}
            accounts = await self.charts.list_accounts()
            balances = await self.projector.closing_balances(as_of_date)

        sheet = BalanceSheet(as_of=as_of_date)
        sections: dict[AccountType, BalanceSheetSection] = {
            AccountType.ASSET: sheet.assets,
            AccountType.LIABILITY: sheet.liabilities,
            AccountType.EQUITY: sheet.equity,
        }
        net_income = ZERO

        for account in sorted(accounts, key=lambda a: (a.chart_id, a.id)):
            chart = charts[account.chart_id]
            balance = balances.get(account.id, account.opening_balance)

            if chart.type not in BALANCE_SHEET_TYPES:
                # 수익은 대변, 비용은 차변 잔액 → 순이익 = -(차변 - 대변)
                net_income -= balance
                continue

            if not account.is_active and balance == ZERO:
                continue

            main_head = charts.get(chart.parent_id, chart) if chart.parent_id else chart
            amount = balance if normal_side(chart.type) == NormalSide.DEBIT else -balance
            sections[chart.type].bucket(self.classify(chart, main_head), chart.name).lines.append(
                BalanceSheetLine(
                    name=account.name,
                    amount=amount,
                    account_id=account.id,
                    code=account.code,
                )
            )

        if net_income != ZERO:
            sheet.equity.bucket(SectionType.CURRENT, Defaults.CURRENT_EARNINGS_HEAD).lines.append(
                BalanceSheetLine(name=Defaults.CURRENT_EARNINGS_LINE, amount=net_income)
            )

        difference = sheet.difference.quantize(AMOUNT_QUANTUM)
        if difference != ZERO:
            logger.error(
                f"재무상태표 항등식 불일치 ({as_of_date.isoformat()}): "
                f"자산 {sheet.assets.total}, 부채 {sheet.liabilities.total}, "
                f"자본 {sheet.equity.total}, 차이 {difference}"
            )
            raise IntegrityError(difference, sheet)

        return sheet

    async def import_opening_balances(
        self,
        lines: Sequence[OpeningBalanceLine],
    ) -> list[Account]:
        """기초 재무상태표 입력 (계정 기초 잔액 설정)

        계정과목/계정이 없으면 ChartRepository 검증을 거쳐 생성,
        있으면 기초 잔액만 갱신. 하나의 트랜잭션으로 처리.
        이미 기초 잔액이 있는 계정을 입력에서 빠뜨려 합이 어긋나면 거부.

        Raises:
            ValidationError: 유형 오류, 금액 오류, 자산 != 부채 + 자본,
                기존 기초 잔액과 합쳐 균형이 깨지는 경우
        """
        parsed: list[tuple[OpeningBalanceLine, AccountType, Decimal]] = []
        totals = {t: ZERO for t in BALANCE_SHEET_TYPES}
        for index, line in enumerate(lines):
            try:
                line_type = AccountType(line.type)
            except ValueError as e:
                raise ValidationError(
                    "invalid_opening_type",
                    f"lines[{index}].type must be Asset, Liability or Equity: {line.type!r}",
                ) from e
            if line_type not in BALANCE_SHEET_TYPES:
                raise ValidationError(
                    "invalid_opening_type",
                    f"lines[{index}].type must be Asset, Liability or Equity: {line.type!r}",
                )
            amount = parse_amount(line.amount, f"lines[{index}].amount", allow_negative=True)
            totals[line_type] += amount
            parsed.append((line, line_type, amount))

        assets = totals[AccountType.ASSET]
        claims = totals[AccountType.LIABILITY] + totals[AccountType.EQUITY]
        if assets != claims:
            raise ValidationError(
                "unbalanced_opening_balances",
                f"assets {assets} do not equal liabilities + equity {claims}",
                {"assets": str(assets), "liabilities_and_equity": str(claims)},
            )

        balances: dict[int, Decimal] = {}
        async with self.db.transaction():
            for line, line_type, amount in parsed:
                chart = await self._opening_chart(line.head, line_type)
                signed = amount if normal_side(line_type) == NormalSide.DEBIT else -amount

                code = normalize_code(line.code)
                account = await self.charts.find_account(chart.id, line.account_name.strip(), code)
                if account is None:
                    account = await self.charts.create_account(chart.id, line.account_name, code=code)
                balances[account.id] = signed

            imported = await self.charts.set_opening_balances(balances)

        logger.info(f"기초 잔액 입력 완료: {len(imported)}개 계정, 자산 합계 {assets}")
        return imported

    async def _opening_chart(self, head: str, head_type: AccountType) -> Chart:
        """기초 잔액 행의 계정과목 조회/생성 (없으면 기본 main head 아래 sub-head)"""
        existing = await self.charts.find_chart(head.strip(), head_type)
        if existing is not None:
            return existing

        section = (
            SectionType.FIXED
            if head_type != AccountType.EQUITY and self.is_fixed_name(head)
            else SectionType.CURRENT
        )
        main_name = DEFAULT_MAIN_HEADS[(head_type, section)]
        if head.strip() == main_name:
            return await self.charts.find_or_create_chart(main_name, head_type)
        return await self.charts.find_or_create_chart(head, head_type, parent_name=main_name)
