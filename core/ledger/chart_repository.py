"""
계정과목/계정 저장소

chart 트리(main head → sub-head)와 계정의 생성/조회/수정.
수동 입력과 일괄 입력(import)이 같은 검증 경로를 사용.

검증 규칙:
- chart: 이름 필수, 유형은 5대 계정 유형, 부모는 존재하는 main head,
  sub-head 유형은 부모와 동일, (type, name) 고유
- account: chart 존재, 이름 필수, (chartId, name, code) 고유 (code NULL끼리도 중복)
- 기초 잔액: 생성/수정 경로로는 바꿀 수 없고 set_opening_balances로만 설정.
  한 번에 바꾸는 잔액 변동의 합(차변 - 대변)은 0이어야 함
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import TYPE_CHECKING, Any

from core.constants import ZERO
from core.errors import NotFoundError, ValidationError, storage_errors
from core.ledger.amounts import from_db_amount, parse_amount, to_db_amount
from core.ledger.models import Account, AccountDraft, Chart, ChartDraft, ChartNode
from core.types import AccountType

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


CHART_COLUMNS = "id, name, type, parentId, date, createdAt, updatedAt"
ACCOUNT_COLUMNS = (
    "id, chartId, name, code, date, address, phone1, phone2, goodsName, "
    "isActive, openingBalance, createdAt, updatedAt"
)

MAX_CODE_LENGTH = 40

# update_account에서 변경 가능한 필드 → 컬럼
ACCOUNT_CONTACT_FIELDS: dict[str, str] = {
    "address": "address",
    "phone1": "phone1",
    "phone2": "phone2",
    "goods_name": "goodsName",
}


def _row_to_chart(row: tuple[Any, ...]) -> Chart:
    return Chart(
        id=row[0],
        name=row[1],
        type=AccountType(row[2]),
        parent_id=row[3],
        date=row[4],
        created_at=row[5],
        updated_at=row[6],
    )


def _row_to_account(row: tuple[Any, ...]) -> Account:
    return Account(
        id=row[0],
        chart_id=row[1],
        name=row[2],
        code=row[3],
        date=row[4],
        address=row[5],
        phone1=row[6],
        phone2=row[7],
        goods_name=row[8],
        is_active=bool(row[9]),
        opening_balance=from_db_amount(row[10]),
        created_at=row[11],
        updated_at=row[12],
    )


def _require_name(name: str | None, kind: str) -> str:
    if name is None or not str(name).strip():
        raise ValidationError("empty_name", f"{kind} name is required")
    return str(name).strip()


def _parse_chart_type(value: AccountType | str) -> AccountType:
    try:
        return AccountType(value)
    except ValueError as e:
        valid = [t.value for t in AccountType]
        raise ValidationError(
            "invalid_chart_type",
            f"chart type must be one of {valid}: {value!r}",
        ) from e


def normalize_code(code: Any) -> str | None:
    if code is None:
        return None
    text = str(code).strip()
    if not text:
        return None
    if len(text) > MAX_CODE_LENGTH:
        raise ValidationError(
            "malformed_code",
            f"account code must be at most {MAX_CODE_LENGTH} characters",
            {"code": text},
        )
    return text


class ChartRepository:
    """계정과목/계정 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # Chart
    # -------------------------------------------------------------------------

    async def get_chart(self, chart_id: int) -> Chart:
        """계정과목 조회

        Raises:
            NotFoundError: 존재하지 않는 경우
        """
        with storage_errors("get_chart"):
            row = await self.db.fetchone(
                f"SELECT {CHART_COLUMNS} FROM chart WHERE id = ?", (chart_id,)
            )
        if row is None:
            raise NotFoundError("chart", chart_id)
        return _row_to_chart(row)

    async def find_chart(self, name: str, chart_type: AccountType | str) -> Chart | None:
        """(type, name)으로 계정과목 조회"""
        chart_type = _parse_chart_type(chart_type)
        with storage_errors("find_chart"):
            row = await self.db.fetchone(
                f"SELECT {CHART_COLUMNS} FROM chart WHERE type = ? AND name = ?",
                (chart_type.value, name),
            )
        return _row_to_chart(row) if row else None

    async def list_charts(self, chart_type: AccountType | str | None = None) -> list[Chart]:
        """계정과목 목록 (id 순)"""
        if chart_type is not None:
            chart_type = _parse_chart_type(chart_type)
        with storage_errors("list_charts"):
            if chart_type is None:
                rows = await self.db.fetchall(f"SELECT {CHART_COLUMNS} FROM chart ORDER BY id")
            else:
                rows = await self.db.fetchall(
                    f"SELECT {CHART_COLUMNS} FROM chart WHERE type = ? ORDER BY id",
                    (chart_type.value,),
                )
        return [_row_to_chart(row) for row in rows]

    async def create_chart(
        self,
        name: str,
        chart_type: AccountType | str,
        parent_id: int | None = None,
        chart_date: date | str | None = None,
    ) -> Chart:
        """계정과목 생성

        Args:
            name: 이름
            chart_type: 계정 유형
            parent_id: 부모 main head id (None이면 main head 생성)
            chart_date: 기준일 (None이면 오늘)

        Raises:
            ValidationError: 이름/유형/깊이/중복 규칙 위반
            NotFoundError: 부모가 없는 경우
        """
        name = _require_name(name, "chart")
        parsed_type = _parse_chart_type(chart_type)

        async with self.db.transaction():
            if parent_id is not None:
                parent = await self.get_chart(parent_id)
                if not parent.is_main_head:
                    raise ValidationError(
                        "chart_depth",
                        f"parent chart {parent.name!r} is itself a sub-head",
                        {"parent_id": parent_id},
                    )
                if parent.type != parsed_type:
                    raise ValidationError(
                        "chart_type_mismatch",
                        f"sub-head type {parsed_type.value} differs from parent type {parent.type.value}",
                        {"parent_id": parent_id},
                    )

            if await self.find_chart(name, parsed_type) is not None:
                raise ValidationError(
                    "duplicate_chart",
                    f"chart already exists: {parsed_type.value}/{name}",
                )

            with storage_errors("create_chart"):
                cursor = await self.db.execute(
                    "INSERT INTO chart (date, name, type, parentId) VALUES (?, ?, ?, ?)",
                    (_date_text(chart_date), name, parsed_type.value, parent_id),
                )
            chart = await self.get_chart(cursor.lastrowid)

        logger.info(f"계정과목 생성: {chart.type.value}/{chart.name} (id={chart.id})")
        return chart

    async def find_or_create_chart(
        self,
        name: str,
        chart_type: AccountType | str,
        parent_name: str | None = None,
    ) -> Chart:
        """계정과목 조회, 없으면 생성

        parent_name이 주어지면 같은 유형의 main head를 찾거나 만든 뒤 그 아래에 생성.
        """
        parsed_type = _parse_chart_type(chart_type)
        name = _require_name(name, "chart")

        async with self.db.transaction():
            existing = await self.find_chart(name, parsed_type)
            if existing is not None:
                return existing

            parent_id = None
            if parent_name:
                parent = await self.find_or_create_chart(parent_name, parsed_type)
                parent_id = parent.id
            return await self.create_chart(name, parsed_type, parent_id)

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def get_account(self, account_id: int) -> Account:
        """계정 조회

        Raises:
            NotFoundError: 존재하지 않는 경우
        """
        with storage_errors("get_account"):
            row = await self.db.fetchone(
                f"SELECT {ACCOUNT_COLUMNS} FROM account WHERE id = ?", (account_id,)
            )
        if row is None:
            raise NotFoundError("account", account_id)
        return _row_to_account(row)

    async def list_accounts(
        self,
        chart_id: int | None = None,
        active_only: bool = False,
    ) -> list[Account]:
        """계정 목록 (id 순)"""
        conditions: list[str] = []
        params: list[Any] = []
        if chart_id is not None:
            conditions.append("chartId = ?")
            params.append(chart_id)
        if active_only:
            conditions.append("isActive = 1")

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        with storage_errors("list_accounts"):
            rows = await self.db.fetchall(
                f"SELECT {ACCOUNT_COLUMNS} FROM account {where} ORDER BY id",
                tuple(params),
            )
        return [_row_to_account(row) for row in rows]

    async def find_account(self, chart_id: int, name: str, code: str | None = None) -> Account | None:
        """(chartId, name, code)로 계정 조회 (code NULL끼리 일치)"""
        with storage_errors("find_account"):
            row = await self.db.fetchone(
                f"SELECT {ACCOUNT_COLUMNS} FROM account WHERE chartId = ? AND name = ? AND code IS ?",
                (chart_id, name, code),
            )
        return _row_to_account(row) if row else None

    async def _ensure_unique_account(
        self,
        chart_id: int,
        name: str,
        code: str | None,
        exclude_id: int | None = None,
    ) -> None:
        existing = await self.find_account(chart_id, name, code)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError(
                "duplicate_account",
                f"account already exists in chart {chart_id}: name={name!r}, code={code!r}",
                {"chart_id": chart_id, "account_id": existing.id},
            )

    async def create_account(
        self,
        chart_id: int,
        name: str,
        code: Any = None,
        address: str | None = None,
        phone1: str | None = None,
        phone2: str | None = None,
        goods_name: str | None = None,
        account_date: date | str | None = None,
    ) -> Account:
        """계정 생성

        Args:
            chart_id: 소속 계정과목 id
            name: 계정 이름
            code: 계정 코드 (영문/숫자, 최대 40자)

        기초 잔액은 0으로 생성. 기초 잔액은 set_opening_balances로만 설정.

        Raises:
            NotFoundError: chart가 없는 경우
            ValidationError: 이름/코드/중복 규칙 위반
        """
        name = _require_name(name, "account")
        code = normalize_code(code)

        async with self.db.transaction():
            await self.get_chart(chart_id)
            await self._ensure_unique_account(chart_id, name, code)

            with storage_errors("create_account"):
                cursor = await self.db.execute(
                    """
                    INSERT INTO account (
                        chartId, date, name, code, address, phone1, phone2,
                        goodsName, isActive, openingBalance
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 1, ?)
                    """,
                    (
                        chart_id,
                        _date_text(account_date),
                        name,
                        code,
                        address,
                        phone1,
                        phone2,
                        goods_name,
                        to_db_amount(ZERO),
                    ),
                )
            account = await self.get_account(cursor.lastrowid)

        logger.info(f"계정 생성: {account.name} (id={account.id}, chart={chart_id})")
        return account

    async def update_account(self, account_id: int, **changes: Any) -> Account:
        """계정 수정

        변경 가능: chart_id, name, code, address, phone1, phone2, goods_name.
        is_active는 set_account_active, 기초 잔액은 set_opening_balances 사용.

        Raises:
            NotFoundError: 계정 또는 새 chart가 없는 경우
            ValidationError: 알 수 없는 필드, 중복
        """
        allowed = {"chart_id", "name", "code", *ACCOUNT_CONTACT_FIELDS}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(
                "unknown_field",
                f"cannot update account fields: {sorted(unknown)}",
            )

        async with self.db.transaction():
            current = await self.get_account(account_id)

            chart_id = changes.get("chart_id", current.chart_id)
            name = _require_name(changes["name"], "account") if "name" in changes else current.name
            code = normalize_code(changes["code"]) if "code" in changes else current.code

            if chart_id != current.chart_id:
                await self.get_chart(chart_id)
            await self._ensure_unique_account(chart_id, name, code, exclude_id=account_id)

            assignments = ["chartId = ?", "name = ?", "code = ?"]
            params: list[Any] = [chart_id, name, code]
            for field_name, column in ACCOUNT_CONTACT_FIELDS.items():
                if field_name in changes:
                    assignments.append(f"{column} = ?")
                    params.append(changes[field_name])
            with storage_errors("update_account"):
                await self.db.execute(
                    f"UPDATE account SET {', '.join(assignments)} WHERE id = ?",
                    (*params, account_id),
                )
            return await self.get_account(account_id)

    async def set_account_active(self, account_id: int, active: bool) -> Account:
        """계정 활성/비활성 전환

        비활성 계정은 새 분개에 사용할 수 없지만 과거 원장은 그대로 조회됨.
        """
        async with self.db.transaction():
            await self.get_account(account_id)
            with storage_errors("set_account_active"):
                await self.db.execute(
                    "UPDATE account SET isActive = ? WHERE id = ?",
                    (1 if active else 0, account_id),
                )
            account = await self.get_account(account_id)

        logger.info(f"계정 {'활성화' if active else '비활성화'}: {account.name} (id={account_id})")
        return account

    async def set_opening_balances(self, balances: Mapping[int, Any]) -> list[Account]:
        """계정 기초 잔액 설정 (하나의 트랜잭션)

        기초 잔액은 상대 계정 없이 원장 잔액을 바꾸므로,
        이번 변경분의 합(차변 - 대변 부호 기준)이 0일 때만 반영.
        변경 전에 성립하던 재무상태표 항등식이 변경 후에도 성립.

        Args:
            balances: account id → 새 기초 잔액 (차변 - 대변 부호 기준)

        Returns:
            갱신된 계정 목록 (입력 순서)

        Raises:
            NotFoundError: 계정이 없는 경우
            ValidationError: 금액 오류 (malformed_amount),
                변경분 합이 0이 아님 (unbalanced_opening_balances)
        """
        parsed = {
            account_id: parse_amount(value, f"opening_balance[{account_id}]", allow_negative=True)
            for account_id, value in balances.items()
        }

        async with self.db.transaction():
            delta = ZERO
            for account_id, balance in parsed.items():
                current = await self.get_account(account_id)
                delta += balance - current.opening_balance

            if delta != ZERO:
                raise ValidationError(
                    "unbalanced_opening_balances",
                    f"opening balance changes do not net to zero: {delta}",
                    {"difference": str(delta)},
                )

            for account_id, balance in parsed.items():
                with storage_errors("set_opening_balances"):
                    await self.db.execute(
                        "UPDATE account SET openingBalance = ? WHERE id = ?",
                        (to_db_amount(balance), account_id),
                    )
            accounts = [await self.get_account(account_id) for account_id in parsed]

        logger.info(f"기초 잔액 설정: {len(accounts)}개 계정")
        return accounts

    # -------------------------------------------------------------------------
    # 트리 / 일괄 입력
    # -------------------------------------------------------------------------

    async def list_charts_with_accounts(self) -> list[ChartNode]:
        """계정과목 트리 조회

        Returns:
            main head 노드 목록 (id 순), 각 노드에 sub-head와 계정 포함
        """
        async with self.db.snapshot():
            charts = await self.list_charts()
            accounts = await self.list_accounts()

        nodes = {chart.id: ChartNode(chart=chart) for chart in charts}
        roots: list[ChartNode] = []
        for chart in charts:
            node = nodes[chart.id]
            if chart.parent_id is not None and chart.parent_id in nodes:
                nodes[chart.parent_id].children.append(node)
            else:
                roots.append(node)

        for account in accounts:
            if account.chart_id in nodes:
                nodes[account.chart_id].accounts.append(account)

        return roots

    async def bulk_insert(
        self,
        charts: Sequence[ChartDraft],
        accounts: Sequence[AccountDraft],
    ) -> tuple[list[Chart], list[Account]]:
        """계정과목/계정 일괄 입력 (import 경로)

        수동 입력과 같은 검증을 거치며 하나의 트랜잭션으로 처리.
        하나라도 실패하면 전체 롤백.
        이미 존재하는 계정과목은 재사용하고, 계정은 중복 시 거부.

        Returns:
            (생성 또는 재사용된 chart 목록, 생성된 account 목록)
        """
        created_charts: list[Chart] = []
        created_accounts: list[Account] = []

        async with self.db.transaction():
            for draft in charts:
                created_charts.append(
                    await self.find_or_create_chart(draft.name, draft.type, draft.parent_name)
                )

            for draft in accounts:
                chart_id = await self._resolve_chart_id(draft)
                created_accounts.append(
                    await self.create_account(
                        chart_id,
                        draft.name,
                        code=draft.code,
                        address=draft.address,
                        phone1=draft.phone1,
                        phone2=draft.phone2,
                        goods_name=draft.goods_name,
                    )
                )

        logger.info(
            f"일괄 입력 완료: chart {len(created_charts)}개, account {len(created_accounts)}개"
        )
        return created_charts, created_accounts

    async def _resolve_chart_id(self, draft: AccountDraft) -> int:
        if draft.chart_id is not None:
            return draft.chart_id

        if not draft.chart_name or draft.chart_type is None:
            raise ValidationError(
                "missing_chart",
                f"account {draft.name!r} needs chart_id or chart_name with chart_type",
            )
        chart = await self.find_chart(draft.chart_name, _parse_chart_type(draft.chart_type))
        if chart is None:
            raise NotFoundError("chart", f"{draft.chart_type}/{draft.chart_name}")
        return chart.id


def _date_text(value: date | str | None) -> str:
    if value is None:
        return date.today().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
