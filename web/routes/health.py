"""
헬스 체크 엔드포인트

GET /health - 서버 상태 및 스키마 버전 확인
"""

from fastapi import APIRouter, Depends, HTTPException

from core.errors import LedgerError
from web.dependencies import get_ledger_service
from web.errors import to_http_exception
from web.models.responses import HealthResponse
from web.services.ledger_service import LedgerService

router = APIRouter(tags=["health"])

APP_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    service: LedgerService = Depends(get_ledger_service),
) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, version, schema_version
    """
    try:
        schema_version = await service.schema_version()
    except LedgerError as e:
        raise to_http_exception(e) from e

    if schema_version == 0:
        raise HTTPException(status_code=503, detail="Database is not migrated")

    return HealthResponse(status="ok", version=APP_VERSION, schema_version=schema_version)
