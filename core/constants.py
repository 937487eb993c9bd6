"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → ledgerbook/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


# 금액 소수 자릿수 (고정 스케일)
AMOUNT_PLACES: int = 2
AMOUNT_QUANTUM: Decimal = Decimal(1).scaleb(-AMOUNT_PLACES)  # 0.01
ZERO: Decimal = Decimal("0").quantize(AMOUNT_QUANTUM)


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 고정(비유동) 계정과목 판정용
    FIXED_HEAD_NAMES: tuple[str, ...] = ("Fixed Asset", "Fixed Liability")
    FIXED_HEAD_KEYWORDS: tuple[str, ...] = (
        "property",
        "plant",
        "equipment",
        "long term",
        "non-current",
    )

    # 손익 계정 순액을 자본 섹션에 표시할 때 사용하는 이름
    CURRENT_EARNINGS_HEAD: str = "Current Period Earnings"
    CURRENT_EARNINGS_LINE: str = "Net Income"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    DEFAULT_DB: Path = DATA_DIR / "ledgerbook.db"
