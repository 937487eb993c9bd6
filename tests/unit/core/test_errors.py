"""
core/errors.py 테스트

예외 메시지 형식과 sqlite3 예외 변환 규칙 확인
"""

import sqlite3
from decimal import Decimal

import pytest

from core.errors import (
    IntegrityError,
    LedgerError,
    NotFoundError,
    SchemaMigrationError,
    StorageError,
    ValidationError,
    storage_errors,
)


class TestErrorTypes:
    """예외 타입 테스트"""

    def test_all_inherit_ledger_error(self) -> None:
        """모든 도메인 예외는 LedgerError 하위 타입"""
        for cls in (SchemaMigrationError, ValidationError, IntegrityError, NotFoundError, StorageError):
            assert issubclass(cls, LedgerError)

    def test_schema_migration_error_identifies_step(self) -> None:
        """실패한 마이그레이션 식별자와 원인 포함"""
        cause = sqlite3.OperationalError("no such table: chart")
        error = SchemaMigrationError(3, "rebuild_account_code_as_text", cause)

        assert error.version == 3
        assert error.cause is cause
        assert "003_rebuild_account_code_as_text" in str(error)
        assert "no such table" in str(error)

    def test_validation_error_rule(self) -> None:
        """위반 규칙 포함"""
        error = ValidationError("unbalanced_journal", "debit != credit", {"difference": "1.00"})

        assert error.rule == "unbalanced_journal"
        assert str(error) == "[unbalanced_journal] debit != credit"
        assert error.details["difference"] == "1.00"

    def test_integrity_error_difference(self) -> None:
        """차이 금액 포함"""
        error = IntegrityError(Decimal("10.00"))

        assert error.difference == Decimal("10.00")
        assert error.balance_sheet is None
        assert "10.00" in str(error)


class TestStorageErrors:
    """storage_errors 변환 테스트"""

    def test_constraint_violation(self) -> None:
        """제약 위반 → ValidationError"""
        with pytest.raises(ValidationError) as exc_info:
            with storage_errors("insert"):
                raise sqlite3.IntegrityError("UNIQUE constraint failed: chart.name")

        assert exc_info.value.rule == "constraint_violation"

    def test_posted_guard(self) -> None:
        """보호 트리거 위반 → posted_journal_immutable"""
        with pytest.raises(ValidationError) as exc_info:
            with storage_errors("update"):
                raise sqlite3.IntegrityError("posted journal is immutable")

        assert exc_info.value.rule == "posted_journal_immutable"

    def test_other_sqlite_error(self) -> None:
        """기타 sqlite3 오류 → StorageError"""
        with pytest.raises(StorageError, match="database is locked"):
            with storage_errors("select"):
                raise sqlite3.OperationalError("database is locked")

    def test_domain_errors_pass_through(self) -> None:
        """도메인 예외는 그대로 전달"""
        with pytest.raises(NotFoundError):
            with storage_errors("select"):
                raise NotFoundError("account", 1)
