"""
금액 처리

금액은 TEXT 소수 문자열로 저장하고 합산은 항상 Decimal로 수행 (float 금지).
고정 스케일(AMOUNT_PLACES)보다 긴 소수부는 반올림하지 않고 거부.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from core.constants import AMOUNT_PLACES, AMOUNT_QUANTUM, ZERO
from core.errors import StorageError, ValidationError


def parse_amount(value: Any, field_name: str = "amount", allow_negative: bool = False) -> Decimal:
    """금액 파싱 및 검증

    Args:
        value: 문자열/Decimal/int (None/빈 문자열은 0)
        field_name: 오류 메시지용 필드 이름
        allow_negative: 음수 허용 여부 (기초 잔액 등 부호 있는 값)

    Returns:
        AMOUNT_PLACES로 정규화된 Decimal

    Raises:
        ValidationError: 숫자가 아니거나, 무한/NaN이거나, 음수이거나, 소수부가 너무 긴 경우
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return ZERO

    # float는 이진 표현 오차가 있으므로 받지 않음
    if isinstance(value, (float, bool)):
        raise ValidationError(
            "malformed_amount",
            f"{field_name} must be a decimal string, not {type(value).__name__}",
            {"field": field_name, "value": repr(value)},
        )

    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(
            "malformed_amount",
            f"{field_name} is not a decimal number: {value!r}",
            {"field": field_name, "value": str(value)},
        ) from e

    if not amount.is_finite():
        raise ValidationError(
            "malformed_amount",
            f"{field_name} must be finite: {value!r}",
            {"field": field_name, "value": str(value)},
        )

    if amount < 0 and not allow_negative:
        raise ValidationError(
            "malformed_amount",
            f"{field_name} must not be negative: {value!r}",
            {"field": field_name, "value": str(value)},
        )

    exponent = amount.normalize().as_tuple().exponent
    if isinstance(exponent, int) and exponent < -AMOUNT_PLACES:
        raise ValidationError(
            "malformed_amount",
            f"{field_name} has more than {AMOUNT_PLACES} decimal places: {value!r}",
            {"field": field_name, "value": str(value)},
        )

    try:
        return amount.quantize(AMOUNT_QUANTUM)
    except InvalidOperation as e:
        raise ValidationError(
            "malformed_amount",
            f"{field_name} is too large: {value!r}",
            {"field": field_name, "value": str(value)},
        ) from e


def to_db_amount(amount: Decimal) -> str:
    """저장용 문자열 변환 (고정 스케일)"""
    return str(amount.quantize(AMOUNT_QUANTUM))


def from_db_amount(value: Any) -> Decimal:
    """저장된 금액 문자열을 Decimal로 변환

    과거 데이터의 정수/실수 저장값도 문자열을 거쳐 변환.
    """
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value)).quantize(AMOUNT_QUANTUM)
    except InvalidOperation as e:
        raise StorageError(f"stored amount is not a valid decimal: {value!r}") from e


def parse_date(value: Any, field_name: str = "date") -> date:
    """'YYYY-MM-DD' 날짜 파싱

    Raises:
        ValidationError: 값이 없거나 형식이 잘못된 경우 (rule: missing_date / malformed_date)
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("missing_date", f"{field_name} is required")

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValidationError(
            "malformed_date",
            f"{field_name} must be YYYY-MM-DD: {value!r}",
            {"field": field_name, "value": str(value)},
        ) from e
