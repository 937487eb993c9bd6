"""
Ledger 데이터 구조

저장 엔티티(Chart, Account, Journal, JournalItem)와
요청(JournalDraft)/파생 결과(LedgerRow, BalanceSheet) 정의.
파생 결과는 저장하지 않고 조회 시마다 다시 계산.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from core.constants import ZERO
from core.types import AccountType, BalanceType, SectionType


# =============================================================================
# 저장 엔티티
# =============================================================================


@dataclass(frozen=True)
class Chart:
    """계정과목 (main head 또는 sub-head)

    parent_id가 None이면 main head, 아니면 main head 아래의 sub-head.
    """

    id: int
    name: str
    type: AccountType
    parent_id: int | None = None
    date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_main_head(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True)
class Account:
    """계정

    opening_balance는 차변 - 대변 부호 기준.
    """

    id: int
    chart_id: int
    name: str
    code: str | None = None
    date: str | None = None
    address: str | None = None
    phone1: str | None = None
    phone2: str | None = None
    goods_name: str | None = None
    is_active: bool = True
    opening_balance: Decimal = ZERO
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class JournalItem:
    """분개 항목 (journal_items 행)"""

    id: int
    journal_id: int
    account_id: int
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class Journal:
    """분개 (journal 행 + 항목)"""

    id: int
    date: date
    narration: str | None
    is_posted: bool
    items: tuple[JournalItem, ...] = ()
    created_at: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return sum((item.debit for item in self.items), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((item.credit for item in self.items), ZERO)


# 전기 완료 분개 (is_posted=True인 Journal)
PostedJournal = Journal


# =============================================================================
# 요청
# =============================================================================


@dataclass
class EntryDraft:
    """분개 항목 초안

    금액은 문자열/Decimal/int 원본 그대로 받아 PostingEngine에서 검증.
    debit/credit 중 정확히 하나만 0이 아니어야 함.
    """

    account_id: int
    debit: Any = "0"
    credit: Any = "0"


@dataclass
class JournalDraft:
    """분개 초안 (전기 요청 단위)"""

    date: date | str | None
    entries: list[EntryDraft] = field(default_factory=list)
    narration: str | None = None


@dataclass
class ChartDraft:
    """계정과목 일괄 입력 항목

    parent_name이 있으면 같은 유형의 main head 아래 sub-head로 생성.
    """

    name: str
    type: AccountType | str
    parent_name: str | None = None


@dataclass
class AccountDraft:
    """계정 일괄 입력 항목 (chart는 id 또는 이름으로 지정)"""

    name: str
    chart_id: int | None = None
    chart_name: str | None = None
    chart_type: AccountType | str | None = None
    code: str | None = None
    address: str | None = None
    phone1: str | None = None
    phone2: str | None = None
    goods_name: str | None = None


@dataclass
class OpeningBalanceLine:
    """기초 재무상태표 입력 행

    amount는 정상 잔액 방향 기준 양수 (자산은 차변, 부채/자본은 대변).
    head는 계정과목 이름 (main head 또는 sub-head).
    """

    head: str
    type: AccountType | str
    account_name: str
    amount: Any
    code: str | None = None


# =============================================================================
# 파생 결과
# =============================================================================


@dataclass(frozen=True)
class LedgerRow:
    """원장 행 (계정 기준 전기 항목 1개)

    balance는 차변 - 대변 누적 잔액 (부호 포함),
    balance_type은 계정 유형의 정상 잔액 방향 기준 Dr/Cr.
    """

    journal_id: int
    item_id: int
    date: date
    particulars: str
    narration: str | None
    debit: Decimal
    credit: Decimal
    balance: Decimal
    balance_type: BalanceType
    linked_account_id: int | None = None
    linked_account_name: str | None = None


@dataclass(frozen=True)
class BalanceSheetLine:
    """재무상태표 계정 행 (정상 잔액 방향 기준 금액)"""

    name: str
    amount: Decimal
    account_id: int | None = None
    code: str | None = None


@dataclass
class BalanceSheetBucket:
    """계정과목별 묶음"""

    head: str
    lines: list[BalanceSheetLine] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO)


@dataclass
class BalanceSheetSection:
    """자산/부채/자본 섹션 (유동 + 고정)"""

    current: dict[str, BalanceSheetBucket] = field(default_factory=dict)
    fixed: dict[str, BalanceSheetBucket] = field(default_factory=dict)

    def bucket(self, section: SectionType, head: str) -> BalanceSheetBucket:
        """계정과목 묶음 조회 (없으면 생성)"""
        buckets = self.current if section == SectionType.CURRENT else self.fixed
        if head not in buckets:
            buckets[head] = BalanceSheetBucket(head=head)
        return buckets[head]

    @property
    def total_current(self) -> Decimal:
        return sum((b.subtotal for b in self.current.values()), ZERO)

    @property
    def total_fixed(self) -> Decimal:
        return sum((b.subtotal for b in self.fixed.values()), ZERO)

    @property
    def total(self) -> Decimal:
        return self.total_current + self.total_fixed


@dataclass
class BalanceSheet:
    """재무상태표 (as_of 시점 스냅샷)

    항등식: assets.total == liabilities.total + equity.total
    """

    as_of: date
    assets: BalanceSheetSection = field(default_factory=BalanceSheetSection)
    liabilities: BalanceSheetSection = field(default_factory=BalanceSheetSection)
    equity: BalanceSheetSection = field(default_factory=BalanceSheetSection)

    @property
    def difference(self) -> Decimal:
        """assets.total - (liabilities.total + equity.total)"""
        return self.assets.total - (self.liabilities.total + self.equity.total)

    def to_dict(self) -> dict[str, Any]:
        """직렬화용 dict (금액은 문자열)"""

        def _section(section: BalanceSheetSection) -> dict[str, Any]:
            def _buckets(buckets: dict[str, BalanceSheetBucket]) -> dict[str, Any]:
                return {
                    head: {
                        "lines": [
                            {
                                "account_id": line.account_id,
                                "name": line.name,
                                "code": line.code,
                                "amount": str(line.amount),
                            }
                            for line in bucket.lines
                        ],
                        "subtotal": str(bucket.subtotal),
                    }
                    for head, bucket in buckets.items()
                }

            return {
                "current": _buckets(section.current),
                "total_current": str(section.total_current),
                "fixed": _buckets(section.fixed),
                "total_fixed": str(section.total_fixed),
                "total": str(section.total),
            }

        return {
            "as_of": self.as_of.isoformat(),
            "assets": _section(self.assets),
            "liabilities": _section(self.liabilities),
            "equity": _section(self.equity),
            "difference": str(self.difference),
        }


@dataclass
class ChartNode:
    """계정과목 트리 노드 (main head → sub-head → account)"""

    chart: Chart
    accounts: list[Account] = field(default_factory=list)
    children: list[ChartNode] = field(default_factory=list)
