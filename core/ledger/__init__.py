"""
복식부기 (Double-Entry Bookkeeping) 엔진

계정과목 트리, 분개 전기, 원장 계산, 재무상태표 집계.

사용 예시:
```python
from core.ledger import ChartRepository, PostingEngine, LedgerProjector, BalanceSheetAggregator

charts = ChartRepository(db)
engine = PostingEngine(db)

# 분개 전기
journal = await engine.post(draft)

# 원장 조회
async for row in LedgerProjector(db).project(cash_id, start, end):
    ...

# 재무상태표
sheet = await BalanceSheetAggregator(db).build(as_of)
```
"""

from core.ledger.balance_sheet import BalanceSheetAggregator
from core.ledger.chart_repository import ChartRepository
from core.ledger.models import (
    Account,
    AccountDraft,
    BalanceSheet,
    BalanceSheetBucket,
    BalanceSheetLine,
    BalanceSheetSection,
    Chart,
    ChartDraft,
    ChartNode,
    EntryDraft,
    Journal,
    JournalDraft,
    JournalItem,
    LedgerRow,
    OpeningBalanceLine,
    PostedJournal,
)
from core.ledger.posting import PostingEngine
from core.ledger.projector import LedgerProjection, LedgerProjector

__all__ = [
    # 핵심 클래스
    "ChartRepository",
    "PostingEngine",
    "LedgerProjector",
    "LedgerProjection",
    "BalanceSheetAggregator",
    # 엔티티
    "Chart",
    "Account",
    "Journal",
    "JournalItem",
    "PostedJournal",
    "ChartNode",
    # 요청
    "JournalDraft",
    "EntryDraft",
    "ChartDraft",
    "AccountDraft",
    "OpeningBalanceLine",
    # 파생 결과
    "LedgerRow",
    "BalanceSheet",
    "BalanceSheetSection",
    "BalanceSheetBucket",
    "BalanceSheetLine",
]
