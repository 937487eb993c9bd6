"""
core/types.py 테스트

계정 유형별 정상 잔액 방향과 Dr/Cr 판정 규칙 확인
"""

from decimal import Decimal

import pytest

from core.types import (
    BALANCE_SHEET_TYPES,
    NORMAL_SIDE,
    AccountType,
    BalanceType,
    NormalSide,
    balance_type_for,
    normal_side,
)


class TestAccountType:
    """AccountType 테스트"""

    def test_values(self) -> None:
        """저장값은 chart.type CHECK와 동일"""
        assert [t.value for t in AccountType] == [
            "Asset",
            "Liability",
            "Equity",
            "Revenue",
            "Expense",
        ]

    def test_string_serialization(self) -> None:
        """str 상속으로 문자열 비교 가능"""
        assert AccountType.ASSET == "Asset"


class TestNormalSide:
    """정상 잔액 방향 테이블 테스트"""

    def test_table_covers_all_types(self) -> None:
        """모든 계정 유형이 테이블에 존재"""
        assert set(NORMAL_SIDE) == set(AccountType)

    @pytest.mark.parametrize(
        "account_type,expected",
        [
            (AccountType.ASSET, NormalSide.DEBIT),
            (AccountType.EXPENSE, NormalSide.DEBIT),
            (AccountType.LIABILITY, NormalSide.CREDIT),
            (AccountType.EQUITY, NormalSide.CREDIT),
            (AccountType.REVENUE, NormalSide.CREDIT),
        ],
    )
    def test_normal_side(self, account_type: AccountType, expected: NormalSide) -> None:
        """유형별 정상 잔액 방향"""
        assert normal_side(account_type) == expected

    def test_accepts_string(self) -> None:
        """문자열 유형 허용"""
        assert normal_side("Liability") == NormalSide.CREDIT

    def test_unknown_type(self) -> None:
        """알 수 없는 유형"""
        with pytest.raises(ValueError):
            normal_side("Suspense")

    def test_balance_sheet_types(self) -> None:
        """재무상태표 대상 유형"""
        assert AccountType.REVENUE not in BALANCE_SHEET_TYPES
        assert AccountType.EXPENSE not in BALANCE_SHEET_TYPES


class TestBalanceTypeFor:
    """Dr/Cr 판정 테스트 (balance = 차변 - 대변)"""

    @pytest.mark.parametrize(
        "account_type,balance,expected",
        [
            (AccountType.ASSET, Decimal("500.00"), BalanceType.DR),
            (AccountType.ASSET, Decimal("0"), BalanceType.DR),
            (AccountType.ASSET, Decimal("-1.00"), BalanceType.CR),
            (AccountType.EXPENSE, Decimal("10.00"), BalanceType.DR),
            (AccountType.LIABILITY, Decimal("-500.00"), BalanceType.CR),
            (AccountType.LIABILITY, Decimal("0"), BalanceType.CR),
            (AccountType.LIABILITY, Decimal("20.00"), BalanceType.DR),
            (AccountType.EQUITY, Decimal("-1000.00"), BalanceType.CR),
            (AccountType.REVENUE, Decimal("-300.00"), BalanceType.CR),
            (AccountType.REVENUE, Decimal("5.00"), BalanceType.DR),
        ],
    )
    def test_balance_type(
        self,
        account_type: AccountType,
        balance: Decimal,
        expected: BalanceType,
    ) -> None:
        """정상 방향 0은 정상 쪽, 반대 부호는 반대 쪽"""
        assert balance_type_for(account_type, balance) == expected
