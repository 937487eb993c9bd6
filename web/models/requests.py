"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액은 소수 문자열로 받음 (float 오차 방지). 금액 규칙 검증은 도메인에서 수행.
"""

from pydantic import BaseModel, Field

from core.ledger import AccountDraft, ChartDraft, EntryDraft, JournalDraft, OpeningBalanceLine


class EntryRequest(BaseModel):
    """분개 항목 요청"""

    account_id: int = Field(..., description="계정 ID")
    debit: str = Field(default="0", description="차변 금액")
    credit: str = Field(default="0", description="대변 금액")


class JournalCreateRequest(BaseModel):
    """분개 생성 요청

    draft=True면 전기하지 않고 초안으로 저장.
    """

    date: str = Field(..., description="분개 일자 (YYYY-MM-DD)")
    narration: str | None = Field(default=None, description="적요")
    entries: list[EntryRequest] = Field(default_factory=list, description="분개 항목")
    draft: bool = Field(default=False, description="초안 저장 여부")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "date": "2024-01-31",
                    "narration": "Purchase on credit",
                    "entries": [
                        {"account_id": 1, "debit": "500.00"},
                        {"account_id": 2, "credit": "500.00"},
                    ],
                }
            ]
        }
    }

    def to_draft(self) -> JournalDraft:
        return JournalDraft(
            date=self.date,
            narration=self.narration,
            entries=[
                EntryDraft(account_id=e.account_id, debit=e.debit, credit=e.credit)
                for e in self.entries
            ],
        )


class ReverseJournalRequest(BaseModel):
    """반대 분개 요청"""

    date: str = Field(..., description="반대 분개 일자 (YYYY-MM-DD)")
    narration: str | None = Field(default=None, description="적요 (없으면 자동 생성)")


class ChartImportItem(BaseModel):
    """계정과목 일괄 입력 항목"""

    name: str = Field(..., description="계정과목 이름")
    type: str = Field(..., description="계정 유형 (Asset/Liability/Equity/Revenue/Expense)")
    parent_name: str | None = Field(default=None, description="상위 main head 이름")


class AccountImportItem(BaseModel):
    """계정 일괄 입력 항목

    기초 잔액은 받지 않음 (/api/import/opening-balances 사용).
    """

    name: str = Field(..., description="계정 이름")
    chart_id: int | None = Field(default=None, description="계정과목 ID")
    chart_name: str | None = Field(default=None, description="계정과목 이름 (chart_id 대신)")
    chart_type: str | None = Field(default=None, description="계정과목 유형 (chart_name과 함께)")
    code: str | None = Field(default=None, description="계정 코드")
    address: str | None = Field(default=None, description="주소")
    phone1: str | None = Field(default=None, description="전화번호 1")
    phone2: str | None = Field(default=None, description="전화번호 2")
    goods_name: str | None = Field(default=None, description="취급 품목")

    model_config = {"extra": "forbid"}


class ImportAccountsRequest(BaseModel):
    """계정과목/계정 일괄 입력 요청 (전체 성공 또는 전체 실패)"""

    charts: list[ChartImportItem] = Field(default_factory=list, description="계정과목")
    accounts: list[AccountImportItem] = Field(default_factory=list, description="계정")

    def to_drafts(self) -> tuple[list[ChartDraft], list[AccountDraft]]:
        charts = [ChartDraft(name=c.name, type=c.type, parent_name=c.parent_name) for c in self.charts]
        accounts = [AccountDraft(**a.model_dump()) for a in self.accounts]
        return charts, accounts


class OpeningBalanceItem(BaseModel):
    """기초 재무상태표 행"""

    head: str = Field(..., description="계정과목 이름")
    type: str = Field(..., description="Asset/Liability/Equity")
    account_name: str = Field(..., description="계정 이름")
    amount: str = Field(..., description="금액 (정상 잔액 방향 기준)")
    code: str | None = Field(default=None, description="계정 코드")


class ImportOpeningBalancesRequest(BaseModel):
    """기초 재무상태표 입력 요청"""

    lines: list[OpeningBalanceItem] = Field(default_factory=list, description="재무상태표 행")

    def to_lines(self) -> list[OpeningBalanceLine]:
        return [OpeningBalanceLine(**line.model_dump()) for line in self.lines]
