"""
원장 조회 (Ledger Projector)

전기된 분개 항목에서 계정별 원장(누적 잔액)을 계산.
원장은 저장하지 않고 조회할 때마다 다시 계산.

잔액 점화식: balance[i] = balance[i-1] + debit[i] - credit[i]
시작 잔액 = 계정 기초 잔액 + 조회 시작일 이전 전기분 합계
정렬: 일자 → 분개 id → 항목 id (같은 날짜는 입력 순서)
  입력 순서는 분개가 처음 저장된 순서(분개 id). 초안으로 먼저 저장한 뒤
  나중에 전기한 분개도 저장 시점 위치에 놓임 (전기 시점 아님).
초안(isPosted = 0) 분개는 항상 제외.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import ZERO
from core.errors import NotFoundError, ValidationError, storage_errors
from core.ledger.amounts import from_db_amount, parse_date
from core.ledger.models import LedgerRow
from core.types import AccountType, balance_type_for

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# 반대편 계정이 정확히 하나일 때만 연결 계정으로 사용
# CAST AS REAL은 0 초과 여부 판정에만 사용 (금액 계산은 Decimal)
LEDGER_ROWS_SQL = """
    SELECT r.itemId, r.journalId, r.date, r.narration, r.debitAmount, r.creditAmount,
           r.linkedAccountId, la.name
    FROM (
        SELECT ji.id AS itemId, ji.journalId AS journalId, j.date AS date,
               j.narration AS narration, ji.debitAmount AS debitAmount,
               ji.creditAmount AS creditAmount,
               (
                   SELECT CASE WHEN COUNT(DISTINCT c.accountId) = 1 THEN MIN(c.accountId) END
                   FROM journal_items c
                   WHERE c.journalId = ji.journalId
                     AND c.accountId <> ji.accountId
                     AND (
                         (CAST(ji.debitAmount AS REAL) > 0 AND CAST(c.creditAmount AS REAL) > 0)
                         OR (CAST(ji.creditAmount AS REAL) > 0 AND CAST(c.debitAmount AS REAL) > 0)
                     )
               ) AS linkedAccountId
        FROM journal_items ji
        JOIN journal j ON j.id = ji.journalId
        WHERE ji.accountId = ? AND j.isPosted = 1 {range_filter}
    ) r
    LEFT JOIN account la ON la.id = r.linkedAccountId
    ORDER BY r.date, r.journalId, r.itemId
"""


@dataclass(frozen=True)
class _AccountInfo:
    account_type: AccountType
    opening_balance: Decimal


class LedgerProjection:
    """계정 원장 (지연 평가, 재시작 가능)

    async for로 순회할 때마다 새 스냅샷에서 다시 조회.

    사용 예시:
    ```python
    async for row in projector.project(cash_id, start, end):
        print(row.date, row.debit, row.credit, row.balance, row.balance_type)
    ```
    """

    def __init__(
        self,
        projector: LedgerProjector,
        account_id: int,
        start: date | None,
        end: date | None,
    ):
        self._projector = projector
        self.account_id = account_id
        self.start = start
        self.end = end

    def __aiter__(self) -> AsyncIterator[LedgerRow]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[LedgerRow]:
        info, seed, rows = await self._projector._load(self.account_id, self.start, self.end)

        balance = seed
        for row in rows:
            debit = from_db_amount(row[4])
            credit = from_db_amount(row[5])
            balance = balance + debit - credit
            linked_name = row[7]
            yield LedgerRow(
                journal_id=row[1],
                item_id=row[0],
                date=date.fromisoformat(row[2]),
                particulars=linked_name or row[3] or f"Journal #{row[1]}",
                narration=row[3],
                debit=debit,
                credit=credit,
                balance=balance,
                balance_type=balance_type_for(info.account_type, balance),
                linked_account_id=row[6],
                linked_account_name=linked_name,
            )

    async def to_list(self) -> list[LedgerRow]:
        """전체 행 목록"""
        return [row async for row in self]

    async def opening_balance(self) -> Decimal:
        """조회 시작 시점 잔액 (기초 잔액 + 시작일 이전 전기분)"""
        _info, seed, _rows = await self._projector._load(self.account_id, self.start, None, rows=False)
        return seed

    async def closing_balance(self) -> Decimal:
        """조회 범위 마지막 잔액 (행이 없으면 시작 잔액)"""
        _info, seed, rows = await self._projector._load(self.account_id, self.start, self.end)
        return seed + _net([(row[4], row[5]) for row in rows])


class LedgerProjector:
    """원장 계산기

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    def project(
        self,
        account_id: int,
        start: date | str | None = None,
        end: date | str | None = None,
    ) -> LedgerProjection:
        """계정 원장 조회

        Args:
            account_id: 계정 id
            start: 시작일 (포함, None이면 처음부터)
            end: 종료일 (포함, None이면 끝까지)

        Returns:
            LedgerProjection (순회 시 조회, 계정이 없으면 NotFoundError)

        Raises:
            ValidationError: 날짜 형식 오류 또는 start > end
        """
        start_date = parse_date(start, "start") if start is not None else None
        end_date = parse_date(end, "end") if end is not None else None
        if start_date and end_date and start_date > end_date:
            raise ValidationError(
                "invalid_range",
                f"start {start_date} is after end {end_date}",
            )
        return LedgerProjection(self, account_id, start_date, end_date)

    async def closing_balance(self, account_id: int, as_of: date | str | None = None) -> Decimal:
        """as_of 시점 잔액 (차변 - 대변 부호 기준, 행을 만들지 않음)

        Raises:
            NotFoundError: 계정이 없는 경우
        """
        as_of_date = parse_date(as_of, "as_of") if as_of is not None else None

        async with self.db.snapshot():
            info = await self._account_info(account_id)
            with storage_errors("closing_balance"):
                amounts = await self._posted_amounts(account_id, as_of_date)

        return info.opening_balance + _net(amounts)

    async def closing_balances(self, as_of: date | str | None = None) -> dict[int, Decimal]:
        """전체 계정의 as_of 시점 잔액 (재무상태표용)

        Returns:
            account_id → 잔액 (기초 잔액 포함, 차변 - 대변 부호 기준)
        """
        as_of_date = parse_date(as_of, "as_of") if as_of is not None else None
        date_filter = "AND j.date <= ?" if as_of_date else ""
        params: tuple[Any, ...] = (as_of_date.isoformat(),) if as_of_date else ()

        async with self.db.snapshot():
            with storage_errors("closing_balances"):
                account_rows = await self.db.fetchall("SELECT id, openingBalance FROM account")
                item_rows = await self.db.fetchall(
                    f"""
                    SELECT ji.accountId, ji.debitAmount, ji.creditAmount
                    FROM journal_items ji
                    JOIN journal j ON j.id = ji.journalId
                    WHERE j.isPosted = 1 {date_filter}
                    """,
                    params,
                )

        balances = {row[0]: from_db_amount(row[1]) for row in account_rows}
        for account_id, debit, credit in item_rows:
            balances[account_id] = (
                balances.get(account_id, ZERO) + from_db_amount(debit) - from_db_amount(credit)
            )
        return balances

    # -------------------------------------------------------------------------
    # 내부 조회
    # -------------------------------------------------------------------------

    async def _account_info(self, account_id: int) -> _AccountInfo:
        with storage_errors("account_info"):
            row = await self.db.fetchone(
                """
                SELECT c.type, a.openingBalance
                FROM account a JOIN chart c ON c.id = a.chartId
                WHERE a.id = ?
                """,
                (account_id,),
            )
        if row is None:
            raise NotFoundError("account", account_id)
        return _AccountInfo(account_type=AccountType(row[0]), opening_balance=from_db_amount(row[1]))

    async def _posted_amounts(
        self,
        account_id: int,
        until: date | None,
        before: date | None = None,
    ) -> list[tuple[Any, Any]]:
        conditions = ["ji.accountId = ?", "j.isPosted = 1"]
        params: list[Any] = [account_id]
        if until is not None:
            conditions.append("j.date <= ?")
            params.append(until.isoformat())
        if before is not None:
            conditions.append("j.date < ?")
            params.append(before.isoformat())

        rows = await self.db.fetchall(
            f"""
            SELECT ji.debitAmount, ji.creditAmount
            FROM journal_items ji JOIN journal j ON j.id = ji.journalId
            WHERE {' AND '.join(conditions)}
            """,
            tuple(params),
        )
        return [(row[0], row[1]) for row in rows]

    async def _load(
        self,
        account_id: int,
        start: date | None,
        end: date | None,
        rows: bool = True,
    ) -> tuple[_AccountInfo, Decimal, list[tuple[Any, ...]]]:
        """한 스냅샷에서 계정 정보, 시작 잔액, 범위 내 행 조회"""
        async with self.db.snapshot():
            info = await self._account_info(account_id)

            with storage_errors("project"):
                seed = info.opening_balance
                if start is not None:
                    seed += _net(await self._posted_amounts(account_id, None, before=start))

                ledger_rows: list[tuple[Any, ...]] = []
                if rows:
                    range_filter = ""
                    params: list[Any] = [account_id]
                    if start is not None:
                        range_filter += " AND j.date >= ?"
                        params.append(start.isoformat())
                    if end is not None:
                        range_filter += " AND j.date <= ?"
                        params.append(end.isoformat())
                    ledger_rows = await self.db.fetchall(
                        LEDGER_ROWS_SQL.format(range_filter=range_filter), tuple(params)
                    )

        return info, seed, ledger_rows


def _net(amounts: list[tuple[Any, Any]]) -> Decimal:
    """차변 - 대변 합계"""
    return sum(
        (from_db_amount(debit) - from_db_amount(credit) for debit, credit in amounts),
        ZERO,
    )
