"""
타입 정의 모듈

계정 유형, 잔액 구분 등 핵심 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from decimal import Decimal
from enum import Enum


class AccountType(str, Enum):
    """계정 유형 (복식부기 5대 계정)"""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class BalanceType(str, Enum):
    """잔액 구분 (차변/대변)"""

    DR = "Dr"
    CR = "Cr"


class NormalSide(str, Enum):
    """계정의 정상 잔액 방향"""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class SectionType(str, Enum):
    """재무상태표 구분 (유동 / 고정)"""

    CURRENT = "current"
    FIXED = "fixed"


# 계정 유형별 정상 잔액 방향
# 자산/비용: 차변 잔액이 정상, 부채/자본/수익: 대변 잔액이 정상
NORMAL_SIDE: dict[AccountType, NormalSide] = {
    AccountType.ASSET: NormalSide.DEBIT,
    AccountType.EXPENSE: NormalSide.DEBIT,
    AccountType.LIABILITY: NormalSide.CREDIT,
    AccountType.EQUITY: NormalSide.CREDIT,
    AccountType.REVENUE: NormalSide.CREDIT,
}

# 재무상태표에 포함되는 계정 유형
BALANCE_SHEET_TYPES: tuple[AccountType, ...] = (
    AccountType.ASSET,
    AccountType.LIABILITY,
    AccountType.EQUITY,
)


def normal_side(account_type: AccountType | str) -> NormalSide:
    """계정 유형의 정상 잔액 방향 반환

    Args:
        account_type: 계정 유형 (Enum 또는 문자열)

    Returns:
        NormalSide.DEBIT 또는 NormalSide.CREDIT

    Raises:
        ValueError: 알 수 없는 계정 유형
    """
    return NORMAL_SIDE[AccountType(account_type)]


def balance_type_for(account_type: AccountType | str, balance: Decimal) -> BalanceType:
    """잔액 구분 계산

    balance는 항상 (차변 - 대변) 부호 기준.
    차변 정상 계정은 balance >= 0 이면 Dr,
    대변 정상 계정은 balance <= 0 이면 Cr (0은 정상 방향).

    Args:
        account_type: 계정 유형
        balance: 차변-대변 누적 잔액

    Returns:
        BalanceType.DR 또는 BalanceType.CR
    """
    if normal_side(account_type) == NormalSide.DEBIT:
        return BalanceType.DR if balance >= 0 else BalanceType.CR
    return BalanceType.CR if balance <= 0 else BalanceType.DR
