"""
분개 라우트

분개 전기, 초안 저장, 반대 분개 API
"""

from fastapi import APIRouter, Depends, Path

from core.errors import LedgerError
from web.dependencies import get_ledger_service, get_ledger_service_write
from web.errors import to_http_exception
from web.models.requests import JournalCreateRequest, ReverseJournalRequest
from web.models.responses import JournalResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/journals", tags=["Journals"])


@router.post("", response_model=JournalResponse, status_code=201)
async def create_journal(
    request: JournalCreateRequest,
    service: LedgerService = Depends(get_ledger_service_write),
) -> JournalResponse:
    """분개 전기 (draft=true면 초안 저장)

    검증 실패 시 422, 아무것도 기록하지 않음.
    """
    try:
        if request.draft:
            journal = await service.save_draft(request.to_draft())
        else:
            journal = await service.post_journal(request.to_draft())
    except LedgerError as e:
        raise to_http_exception(e) from e

    return JournalResponse.from_journal(journal)


@router.get("/{journal_id}", response_model=JournalResponse)
async def get_journal(
    journal_id: int = Path(..., description="분개 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> JournalResponse:
    """분개 조회"""
    try:
        journal = await service.get_journal(journal_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return JournalResponse.from_journal(journal)


@router.post("/{journal_id}/reverse", response_model=JournalResponse, status_code=201)
async def reverse_journal(
    request: ReverseJournalRequest,
    journal_id: int = Path(..., description="원 분개 ID"),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JournalResponse:
    """반대 분개 전기 (전기된 분개의 정정 수단)"""
    try:
        journal = await service.reverse_journal(journal_id, request.date, request.narration)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return JournalResponse.from_journal(journal)
