"""
Web 서비스 패키지

라우트와 도메인 엔진 사이의 파사드.
"""

from web.services.ledger_service import LedgerService, LedgerStatement

__all__ = [
    "LedgerService",
    "LedgerStatement",
]
