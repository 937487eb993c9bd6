"""
도메인 예외 → HTTP 응답 변환

- ValidationError → 422
- NotFoundError → 404
- IntegrityError → 409 (계산된 재무상태표 포함)
- StorageError / 기타 LedgerError → 503
"""

from fastapi import HTTPException

from core.errors import IntegrityError, LedgerError, NotFoundError, ValidationError


def to_http_exception(error: LedgerError) -> HTTPException:
    """도메인 예외를 HTTPException으로 변환"""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=422,
            detail={
                "error": "validation_error",
                "rule": error.rule,
                "message": error.message,
                "details": error.details,
            },
        )

    if isinstance(error, NotFoundError):
        return HTTPException(
            status_code=404,
            detail={"error": "not_found", "message": str(error)},
        )

    if isinstance(error, IntegrityError):
        return HTTPException(
            status_code=409,
            detail={
                "error": "integrity_error",
                "message": str(error),
                "difference": str(error.difference),
                "balance_sheet": error.balance_sheet.to_dict() if error.balance_sheet else None,
            },
        )

    return HTTPException(
        status_code=503,
        detail={"error": "storage_error", "message": str(error)},
    )
