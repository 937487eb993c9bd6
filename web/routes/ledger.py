"""
원장 라우트

계정별 원장(누적 잔액) 조회 API
"""

from fastapi import APIRouter, Depends, Path, Query

from core.errors import LedgerError
from web.dependencies import get_ledger_service
from web.errors import to_http_exception
from web.models.responses import AccountResponse, LedgerResponse, LedgerRowResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("/{account_id}", response_model=LedgerResponse)
async def get_ledger(
    account_id: int = Path(..., description="계정 ID"),
    start: str | None = Query(default=None, description="시작일 (YYYY-MM-DD, 포함)"),
    end: str | None = Query(default=None, description="종료일 (YYYY-MM-DD, 포함)"),
    service: LedgerService = Depends(get_ledger_service),
) -> LedgerResponse:
    """계정 원장 조회

    전기된 분개만 포함. 시작일 이전 거래는 시작 잔액에 반영.
    """
    try:
        statement = await service.get_ledger(account_id, start, end)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return LedgerResponse(
        account=AccountResponse.from_account(statement.account),
        start=statement.start.isoformat() if statement.start else None,
        end=statement.end.isoformat() if statement.end else None,
        opening_balance=str(statement.opening_balance),
        closing_balance=str(statement.closing_balance),
        rows=[LedgerRowResponse.from_row(row) for row in statement.rows],
    )
