"""
도메인 예외 정의

경계(서비스/라우트)를 넘어가는 예외는 모두 LedgerError 하위 타입.
sqlite3/aiosqlite 원본 예외는 컴포넌트 경계에서 아래 타입으로 감싸서 전달.

- SchemaMigrationError: 마이그레이션 실패 (치명적, 시작 중단)
- ValidationError: 도메인 규칙 위반 (복구 가능, 요청 단위 거부)
- IntegrityError: 파생 계산 검증 실패 (재무상태표 항등식 불일치)
- NotFoundError: 참조 대상 없음
- StorageError: 위 분류에 속하지 않는 저장소 장애 (I/O, 잠금)
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from core.ledger.models import BalanceSheet


class LedgerError(Exception):
    """Ledger 엔진 예외 기본 클래스"""

    pass


class SchemaMigrationError(LedgerError):
    """마이그레이션 실패

    실패한 마이그레이션 식별자와 원인 예외를 포함.
    해당 트랜잭션은 전체 롤백된 상태.
    """

    def __init__(self, version: int | None, name: str | None, cause: BaseException | str):
        self.version = version
        self.name = name
        self.cause = cause
        label = f"{version:03d}_{name}" if version is not None and name else (name or "migrations")
        super().__init__(f"Migration failed: {label}: {cause}")


class ValidationError(LedgerError):
    """도메인 규칙 위반

    Args:
        rule: 위반한 규칙 식별자 (예: "unbalanced_journal")
        message: 사람이 읽을 수 있는 설명
        details: 추가 정보 (합계, 계정 ID 등)
    """

    def __init__(self, rule: str, message: str, details: dict[str, Any] | None = None):
        self.rule = rule
        self.message = message
        self.details = details or {}
        super().__init__(f"[{rule}] {message}")


class IntegrityError(LedgerError):
    """재무상태표 항등식 불일치

    자동 보정하지 않음. 계산된 재무상태표를 함께 전달.
    """

    def __init__(self, difference: Decimal, balance_sheet: BalanceSheet | None = None):
        self.difference = difference
        self.balance_sheet = balance_sheet
        super().__init__(
            f"Balance sheet identity violated: assets - (liabilities + equity) = {difference}"
        )


class NotFoundError(LedgerError):
    """참조 대상 없음 (account, chart, journal)"""

    def __init__(self, kind: str, identifier: Any):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class StorageError(LedgerError):
    """저장소 장애 (I/O, 잠금 경합 등)"""

    pass


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """sqlite3 예외를 도메인 예외로 변환

    - 보호 트리거 위반 → ValidationError("posted_journal_immutable")
    - 기타 제약 위반 → ValidationError("constraint_violation")
    - 그 외 sqlite3.Error → StorageError

    Args:
        operation: 오류 메시지용 작업 이름
    """
    try:
        yield
    except sqlite3.IntegrityError as e:
        if "posted journal is immutable" in str(e):
            raise ValidationError(
                "posted_journal_immutable",
                f"{operation}: posted journals cannot be changed",
            ) from e
        raise ValidationError(
            "constraint_violation",
            f"{operation}: {e}",
        ) from e
    except sqlite3.Error as e:
        raise StorageError(f"{operation}: {e}") from e
