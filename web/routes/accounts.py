"""
계정 라우트

계정/계정과목 조회 및 일괄 입력 API
"""

from fastapi import APIRouter, Depends, Path

from core.errors import LedgerError
from web.dependencies import get_ledger_service, get_ledger_service_write
from web.errors import to_http_exception
from web.models.requests import ImportAccountsRequest
from web.models.responses import (
    AccountResponse,
    ChartNodeResponse,
    ChartResponse,
    ImportResultResponse,
)
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api", tags=["Accounts"])


@router.get("/accounts/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int = Path(..., description="계정 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    """계정 조회"""
    try:
        account = await service.get_account(account_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return AccountResponse.from_account(account)


@router.get("/charts", response_model=list[ChartNodeResponse])
async def list_charts_with_accounts(
    service: LedgerService = Depends(get_ledger_service),
) -> list[ChartNodeResponse]:
    """계정과목 트리 조회 (main head → sub-head → 계정)"""
    try:
        nodes = await service.list_charts_with_accounts()
    except LedgerError as e:
        raise to_http_exception(e) from e

    return [ChartNodeResponse.from_node(node) for node in nodes]


@router.post("/import/accounts", response_model=ImportResultResponse, status_code=201)
async def import_accounts(
    request: ImportAccountsRequest,
    service: LedgerService = Depends(get_ledger_service_write),
) -> ImportResultResponse:
    """계정과목/계정 일괄 입력

    수동 입력과 같은 검증을 거치며, 하나라도 실패하면 전체 롤백.
    """
    charts, accounts = request.to_drafts()
    try:
        created_charts, created_accounts = await service.import_charts_and_accounts(
            charts, accounts
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ImportResultResponse(
        charts=[ChartResponse.from_chart(c) for c in created_charts],
        accounts=[AccountResponse.from_account(a) for a in created_accounts],
    )
