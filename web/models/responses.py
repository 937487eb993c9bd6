"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화. 금액은 문자열.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from core.ledger import (
    Account,
    BalanceSheet,
    BalanceSheetSection,
    Chart,
    ChartNode,
    Journal,
    LedgerRow,
)


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="애플리케이션 버전")
    schema_version: int = Field(..., description="적용된 마이그레이션 버전")


class ChartResponse(BaseModel):
    """계정과목 응답"""

    id: int = Field(..., description="계정과목 ID")
    name: str = Field(..., description="이름")
    type: str = Field(..., description="계정 유형")
    parent_id: int | None = Field(default=None, description="상위 main head ID")

    @classmethod
    def from_chart(cls, chart: Chart) -> ChartResponse:
        return cls(id=chart.id, name=chart.name, type=chart.type.value, parent_id=chart.parent_id)


class AccountResponse(BaseModel):
    """계정 응답"""

    id: int = Field(..., description="계정 ID")
    chart_id: int = Field(..., description="계정과목 ID")
    name: str = Field(..., description="이름")
    code: str | None = Field(default=None, description="계정 코드")
    address: str | None = Field(default=None, description="주소")
    phone1: str | None = Field(default=None, description="전화번호 1")
    phone2: str | None = Field(default=None, description="전화번호 2")
    goods_name: str | None = Field(default=None, description="취급 품목")
    is_active: bool = Field(..., description="활성 여부")
    opening_balance: str = Field(..., description="기초 잔액 (차변 - 대변)")

    @classmethod
    def from_account(cls, account: Account) -> AccountResponse:
        return cls(
            id=account.id,
            chart_id=account.chart_id,
            name=account.name,
            code=account.code,
            address=account.address,
            phone1=account.phone1,
            phone2=account.phone2,
            goods_name=account.goods_name,
            is_active=account.is_active,
            opening_balance=str(account.opening_balance),
        )


class ChartNodeResponse(BaseModel):
    """계정과목 트리 노드"""

    chart: ChartResponse
    accounts: list[AccountResponse] = Field(default_factory=list)
    children: list[ChartNodeResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: ChartNode) -> ChartNodeResponse:
        return cls(
            chart=ChartResponse.from_chart(node.chart),
            accounts=[AccountResponse.from_account(a) for a in node.accounts],
            children=[cls.from_node(child) for child in node.children],
        )


class LedgerRowResponse(BaseModel):
    """원장 행"""

    journal_id: int
    item_id: int
    date: str
    particulars: str
    narration: str | None = None
    debit: str
    credit: str
    balance: str = Field(..., description="누적 잔액 (차변 - 대변)")
    balance_type: str = Field(..., description="Dr/Cr")
    linked_account_id: int | None = None
    linked_account_name: str | None = None

    @classmethod
    def from_row(cls, row: LedgerRow) -> LedgerRowResponse:
        return cls(
            journal_id=row.journal_id,
            item_id=row.item_id,
            date=row.date.isoformat(),
            particulars=row.particulars,
            narration=row.narration,
            debit=str(row.debit),
            credit=str(row.credit),
            balance=str(row.balance),
            balance_type=row.balance_type.value,
            linked_account_id=row.linked_account_id,
            linked_account_name=row.linked_account_name,
        )


class LedgerResponse(BaseModel):
    """계정 원장 응답"""

    account: AccountResponse
    start: str | None = None
    end: str | None = None
    opening_balance: str
    closing_balance: str
    rows: list[LedgerRowResponse]


class JournalItemResponse(BaseModel):
    """분개 항목 응답"""

    id: int
    account_id: int
    debit: str
    credit: str


class JournalResponse(BaseModel):
    """분개 응답"""

    id: int
    date: str
    narration: str | None = None
    is_posted: bool
    items: list[JournalItemResponse]

    @classmethod
    def from_journal(cls, journal: Journal) -> JournalResponse:
        return cls(
            id=journal.id,
            date=journal.date.isoformat(),
            narration=journal.narration,
            is_posted=journal.is_posted,
            items=[
                JournalItemResponse(
                    id=item.id,
                    account_id=item.account_id,
                    debit=str(item.debit),
                    credit=str(item.credit),
                )
                for item in journal.items
            ],
        )


class BalanceSheetLineResponse(BaseModel):
    """재무상태표 계정 행"""

    account_id: int | None = None
    name: str
    code: str | None = None
    amount: str


class BalanceSheetBucketResponse(BaseModel):
    """계정과목별 묶음"""

    lines: list[BalanceSheetLineResponse]
    subtotal: str


class BalanceSheetSectionResponse(BaseModel):
    """자산/부채/자본 섹션"""

    current: dict[str, BalanceSheetBucketResponse]
    total_current: str
    fixed: dict[str, BalanceSheetBucketResponse]
    total_fixed: str
    total: str

    @classmethod
    def from_section(cls, section: BalanceSheetSection) -> BalanceSheetSectionResponse:
        def _buckets(buckets):
            return {
                head: BalanceSheetBucketResponse(
                    lines=[
                        BalanceSheetLineResponse(
                            account_id=line.account_id,
                            name=line.name,
                            code=line.code,
                            amount=str(line.amount),
                        )
                        for line in bucket.lines
                    ],
                    subtotal=str(bucket.subtotal),
                )
                for head, bucket in buckets.items()
            }

        return cls(
            current=_buckets(section.current),
            total_current=str(section.total_current),
            fixed=_buckets(section.fixed),
            total_fixed=str(section.total_fixed),
            total=str(section.total),
        )


class BalanceSheetResponse(BaseModel):
    """재무상태표 응답"""

    as_of: str
    assets: BalanceSheetSectionResponse
    liabilities: BalanceSheetSectionResponse
    equity: BalanceSheetSectionResponse
    difference: str

    @classmethod
    def from_sheet(cls, sheet: BalanceSheet) -> BalanceSheetResponse:
        return cls(
            as_of=sheet.as_of.isoformat(),
            assets=BalanceSheetSectionResponse.from_section(sheet.assets),
            liabilities=BalanceSheetSectionResponse.from_section(sheet.liabilities),
            equity=BalanceSheetSectionResponse.from_section(sheet.equity),
            difference=str(sheet.difference),
        )


class ImportResultResponse(BaseModel):
    """일괄 입력 결과"""

    charts: list[ChartResponse] = Field(default_factory=list)
    accounts: list[AccountResponse] = Field(default_factory=list)

