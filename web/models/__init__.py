"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountImportItem,
    ChartImportItem,
    EntryRequest,
    ImportAccountsRequest,
    ImportOpeningBalancesRequest,
    JournalCreateRequest,
    OpeningBalanceItem,
    ReverseJournalRequest,
)
from web.models.responses import (
    AccountResponse,
    BalanceSheetResponse,
    ChartNodeResponse,
    ChartResponse,
    HealthResponse,
    ImportResultResponse,
    JournalResponse,
    LedgerResponse,
    LedgerRowResponse,
)

__all__ = [
    # Requests
    "AccountImportItem",
    "ChartImportItem",
    "EntryRequest",
    "ImportAccountsRequest",
    "ImportOpeningBalancesRequest",
    "JournalCreateRequest",
    "OpeningBalanceItem",
    "ReverseJournalRequest",
    # Responses
    "AccountResponse",
    "BalanceSheetResponse",
    "ChartNodeResponse",
    "ChartResponse",
    "HealthResponse",
    "ImportResultResponse",
    "JournalResponse",
    "LedgerResponse",
    "LedgerRowResponse",
]
