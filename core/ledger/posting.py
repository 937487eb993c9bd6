"""
분개 전기 엔진

분개 초안을 검증하고 journal + journal_items를 하나의 트랜잭션으로 기록.
검증에 실패하면 아무 행도 쓰지 않음.

검증 규칙 (위반 시 ValidationError, rule 값):
- missing_date / malformed_date: 분개 일자 누락/형식 오류
- empty_journal: 항목 없음
- malformed_amount: 숫자가 아님, 음수, 무한, 소수 자릿수 초과
- ambiguous_entry: 한 항목에 차변/대변이 둘 다 있거나 둘 다 0
- one_sided_journal: 차변 항목 또는 대변 항목이 하나도 없음
- unknown_account / inactive_account: 없는 계정, 비활성 계정
- unbalanced_journal: 차변 합계 != 대변 합계 (정확히 일치해야 함)

전기된 분개는 수정/삭제 경로가 없음. 정정은 reverse()로 반대 분개를 전기.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import ZERO
from core.errors import NotFoundError, ValidationError, storage_errors
from core.ledger.amounts import from_db_amount, parse_amount, parse_date, to_db_amount
from core.ledger.models import EntryDraft, Journal, JournalDraft, JournalItem, PostedJournal

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Leg:
    """검증된 분개 항목"""

    account_id: int
    debit: Decimal
    credit: Decimal


class PostingEngine:
    """분개 전기 엔진

    Args:
        db: SQLite 어댑터 (쓰기 연결)

    사용 예시:
    ```python
    engine = PostingEngine(db)
    journal = await engine.post(JournalDraft(
        date="2024-01-31",
        narration="Purchase on credit",
        entries=[
            EntryDraft(account_id=cash_id, debit="500.00"),
            EntryDraft(account_id=payable_id, credit="500.00"),
        ],
    ))
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 검증
    # -------------------------------------------------------------------------

    def _parse_legs(self, entries: list[EntryDraft]) -> list[_Leg]:
        """항목 구조 검증 (DB 조회 없음)"""
        if not entries:
            raise ValidationError("empty_journal", "journal must have at least one entry")

        legs: list[_Leg] = []
        for index, entry in enumerate(entries):
            debit = parse_amount(entry.debit, f"entries[{index}].debit")
            credit = parse_amount(entry.credit, f"entries[{index}].credit")

            if (debit == ZERO) == (credit == ZERO):
                raise ValidationError(
                    "ambiguous_entry",
                    f"entries[{index}] must have exactly one of debit or credit",
                    {"index": index, "account_id": entry.account_id},
                )
            legs.append(_Leg(account_id=entry.account_id, debit=debit, credit=credit))

        return legs

    def _check_balanced(self, legs: list[_Leg]) -> None:
        """양변 존재 및 합계 일치 검증"""
        if not any(leg.debit > 0 for leg in legs) or not any(leg.credit > 0 for leg in legs):
            raise ValidationError(
                "one_sided_journal",
                "journal needs at least one debit entry and one credit entry",
            )

        total_debit = sum((leg.debit for leg in legs), ZERO)
        total_credit = sum((leg.credit for leg in legs), ZERO)
        if total_debit != total_credit:
            raise ValidationError(
                "unbalanced_journal",
                f"total debit {total_debit} does not equal total credit {total_credit}",
                {
                    "total_debit": str(total_debit),
                    "total_credit": str(total_credit),
                    "difference": str(total_debit - total_credit),
                },
            )

    async def _check_accounts(self, legs: list[_Leg], require_active: bool) -> None:
        """계정 존재/활성 검증 (트랜잭션 안에서 호출)"""
        for account_id in dict.fromkeys(leg.account_id for leg in legs):
            with storage_errors("check_account"):
                row = await self.db.fetchone(
                    "SELECT name, isActive FROM account WHERE id = ?", (account_id,)
                )
            if row is None:
                raise ValidationError(
                    "unknown_account",
                    f"account does not exist: {account_id}",
                    {"account_id": account_id},
                )
            if require_active and not row[1]:
                raise ValidationError(
                    "inactive_account",
                    f"account {row[0]!r} is inactive and cannot be posted to",
                    {"account_id": account_id},
                )

    # -------------------------------------------------------------------------
    # 전기
    # -------------------------------------------------------------------------

    async def post(self, draft: JournalDraft) -> PostedJournal:
        """분개 검증 후 전기

        Args:
            draft: 분개 초안

        Returns:
            전기된 분개

        Raises:
            ValidationError: 검증 실패 (아무 행도 쓰지 않음)
        """
        try:
            journal_date = parse_date(draft.date, "date")
            legs = self._parse_legs(draft.entries)
            self._check_balanced(legs)

            async with self.db.transaction():
                await self._check_accounts(legs, require_active=True)
                journal_id = await self._insert_journal(journal_date, draft.narration, legs)
                # 항목을 모두 쓴 뒤 전기 플래그 설정 (이후 보호 트리거 적용)
                with storage_errors("post"):
                    await self.db.execute(
                        "UPDATE journal SET isPosted = 1 WHERE id = ?", (journal_id,)
                    )
                journal = await self.get_journal(journal_id)
        except ValidationError as e:
            logger.warning(f"분개 전기 거부: {e}")
            raise

        logger.info(
            f"분개 전기: #{journal.id} {journal.date.isoformat()} "
            f"({len(journal.items)}개 항목, {journal.total_debit})"
        )
        return journal

    async def save_draft(self, draft: JournalDraft) -> Journal:
        """미전기 분개 저장

        구조(일자, 금액, 항목 방향)와 계정 존재만 검증.
        합계 불일치와 비활성 계정은 post_draft 시점에 검증.
        """
        journal_date = parse_date(draft.date, "date")
        legs = self._parse_legs(draft.entries)

        async with self.db.transaction():
            await self._check_accounts(legs, require_active=False)
            journal_id = await self._insert_journal(journal_date, draft.narration, legs)
            journal = await self.get_journal(journal_id)

        logger.info(f"분개 초안 저장: #{journal.id}")
        return journal

    async def post_draft(self, journal_id: int) -> PostedJournal:
        """저장된 초안 전기

        Raises:
            NotFoundError: 분개가 없는 경우
            ValidationError: 이미 전기됨(already_posted) 또는 검증 실패
        """
        try:
            async with self.db.transaction():
                journal = await self.get_journal(journal_id)
                if journal.is_posted:
                    raise ValidationError(
                        "already_posted",
                        f"journal #{journal_id} is already posted",
                        {"journal_id": journal_id},
                    )

                legs = self._parse_legs(
                    [
                        EntryDraft(account_id=item.account_id, debit=item.debit, credit=item.credit)
                        for item in journal.items
                    ]
                )
                self._check_balanced(legs)
                await self._check_accounts(legs, require_active=True)

                with storage_errors("post_draft"):
                    await self.db.execute(
                        "UPDATE journal SET isPosted = 1 WHERE id = ?", (journal_id,)
                    )
                posted = await self.get_journal(journal_id)
        except ValidationError as e:
            logger.warning(f"초안 전기 거부: #{journal_id}: {e}")
            raise

        logger.info(f"초안 전기: #{journal_id}")
        return posted

    async def delete_draft(self, journal_id: int) -> None:
        """미전기 분개 삭제 (항목은 cascade 삭제)

        Raises:
            NotFoundError: 분개가 없는 경우
            ValidationError: 전기된 분개인 경우 (posted_journal_immutable)
        """
        async with self.db.transaction():
            journal = await self.get_journal(journal_id)
            if journal.is_posted:
                raise ValidationError(
                    "posted_journal_immutable",
                    f"journal #{journal_id} is posted; use a reversing entry instead",
                    {"journal_id": journal_id},
                )
            with storage_errors("delete_draft"):
                await self.db.execute("DELETE FROM journal WHERE id = ?", (journal_id,))

        logger.info(f"분개 초안 삭제: #{journal_id}")

    async def reverse(
        self,
        journal_id: int,
        reversal_date: date | str,
        narration: str | None = None,
    ) -> PostedJournal:
        """반대 분개 전기 (차변/대변 교환)

        원 분개는 그대로 두고 상쇄 분개를 새로 전기.
        반대 분개도 일반 전기와 같은 검증을 거침 (비활성 계정이면 거부).

        Raises:
            NotFoundError: 분개가 없는 경우
            ValidationError: 미전기 분개(not_posted) 또는 검증 실패
        """
        async with self.db.transaction():
            original = await self.get_journal(journal_id)
            if not original.is_posted:
                raise ValidationError(
                    "not_posted",
                    f"journal #{journal_id} is a draft; delete it instead of reversing",
                    {"journal_id": journal_id},
                )

            return await self.post(
                JournalDraft(
                    date=reversal_date,
                    narration=narration or f"Reversal of journal #{journal_id}",
                    entries=[
                        EntryDraft(account_id=item.account_id, debit=item.credit, credit=item.debit)
                        for item in original.items
                    ],
                )
            )

    async def _insert_journal(
        self,
        journal_date: date,
        narration: str | None,
        legs: list[_Leg],
    ) -> int:
        """journal(미전기) + journal_items 기록, journal id 반환"""
        with storage_errors("insert_journal"):
            cursor = await self.db.execute(
                "INSERT INTO journal (date, narration, isPosted) VALUES (?, ?, 0)",
                (journal_date.isoformat(), narration),
            )
            journal_id = cursor.lastrowid
            await self.db.executemany(
                """
                INSERT INTO journal_items (journalId, accountId, debitAmount, creditAmount)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (journal_id, leg.account_id, to_db_amount(leg.debit), to_db_amount(leg.credit))
                    for leg in legs
                ],
            )
        return journal_id

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_journal(self, journal_id: int) -> Journal:
        """분개 조회 (항목 포함)

        Raises:
            NotFoundError: 존재하지 않는 경우
        """
        async with self.db.snapshot():
            with storage_errors("get_journal"):
                row = await self.db.fetchone(
                    "SELECT id, date, narration, isPosted, createdAt FROM journal WHERE id = ?",
                    (journal_id,),
                )
                if row is None:
                    raise NotFoundError("journal", journal_id)
                item_rows = await self.db.fetchall(
                    """
                    SELECT id, journalId, accountId, debitAmount, creditAmount
                    FROM journal_items WHERE journalId = ? ORDER BY id
                    """,
                    (journal_id,),
                )

        return _row_to_journal(row, item_rows)

    async def list_journals(
        self,
        posted: bool | None = None,
        start: date | str | None = None,
        end: date | str | None = None,
    ) -> list[Journal]:
        """분개 목록 (일자, id 순)

        Args:
            posted: True=전기분만, False=초안만, None=전체
            start: 시작일 (포함)
            end: 종료일 (포함)
        """
        conditions: list[str] = []
        params: list[Any] = []
        if posted is not None:
            conditions.append("isPosted = ?")
            params.append(1 if posted else 0)
        if start is not None:
            conditions.append("date >= ?")
            params.append(parse_date(start, "start").isoformat())
        if end is not None:
            conditions.append("date <= ?")
            params.append(parse_date(end, "end").isoformat())
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with self.db.snapshot():
            with storage_errors("list_journals"):
                rows = await self.db.fetchall(
                    f"""
                    SELECT id, date, narration, isPosted, createdAt FROM journal
                    {where} ORDER BY date, id
                    """,
                    tuple(params),
                )
                item_rows = await self.db.fetchall(
                    f"""
                    SELECT ji.id, ji.journalId, ji.accountId, ji.debitAmount, ji.creditAmount
                    FROM journal_items ji
                    WHERE ji.journalId IN (SELECT id FROM journal {where})
                    ORDER BY ji.id
                    """,
                    tuple(params),
                )

        items_by_journal: dict[int, list[tuple[Any, ...]]] = {}
        for item_row in item_rows:
            items_by_journal.setdefault(item_row[1], []).append(item_row)

        return [_row_to_journal(row, items_by_journal.get(row[0], [])) for row in rows]


def _row_to_journal(row: tuple[Any, ...], item_rows: list[tuple[Any, ...]]) -> Journal:
    return Journal(
        id=row[0],
        date=date.fromisoformat(row[1]),
        narration=row[2],
        is_posted=bool(row[3]),
        created_at=row[4],
        items=tuple(
            JournalItem(
                id=item[0],
                journal_id=item[1],
                account_id=item[2],
                debit=from_db_amount(item[3]),
                credit=from_db_amount(item[4]),
            )
            for item in item_rows
        ),
    )
