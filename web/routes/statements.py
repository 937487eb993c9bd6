"""
재무제표 라우트

재무상태표 조회 및 기초 잔액 입력 API
"""

from fastapi import APIRouter, Depends, Query

from core.errors import LedgerError
from web.dependencies import get_ledger_service, get_ledger_service_write
from web.errors import to_http_exception
from web.models.requests import ImportOpeningBalancesRequest
from web.models.responses import AccountResponse, BalanceSheetResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api", tags=["Statements"])


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
async def get_balance_sheet(
    as_of: str | None = Query(default=None, description="기준일 (YYYY-MM-DD, 기본: 오늘)"),
    service: LedgerService = Depends(get_ledger_service),
) -> BalanceSheetResponse:
    """재무상태표 조회

    자산 != 부채 + 자본이면 409와 함께 계산된 재무상태표 반환.
    """
    try:
        sheet = await service.get_balance_sheet(as_of)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return BalanceSheetResponse.from_sheet(sheet)


@router.post(
    "/import/opening-balances",
    response_model=list[AccountResponse],
    status_code=201,
)
async def import_opening_balances(
    request: ImportOpeningBalancesRequest,
    service: LedgerService = Depends(get_ledger_service_write),
) -> list[AccountResponse]:
    """기초 재무상태표 입력 (자산 = 부채 + 자본 이어야 함)"""
    try:
        accounts = await service.import_opening_balances(request.to_lines())
    except LedgerError as e:
        raise to_http_exception(e) from e

    return [AccountResponse.from_account(a) for a in accounts]
