"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성.
기본 경로의 파일이 없으면 기본값으로 동작하고,
명시적으로 지정한 파일이 없으면 오류.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths


@dataclass(frozen=True)
class DatabaseConfig:
    """DB 설정"""

    path: Path = Paths.DEFAULT_DB


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class BalanceSheetConfig:
    """재무상태표 분류 설정

    fixed_heads: 고정(비유동)으로 분류할 계정과목 이름
    fixed_keywords: 이름에 포함되면 고정으로 분류할 키워드 (대소문자 무시)
    """

    fixed_heads: tuple[str, ...] = Defaults.FIXED_HEAD_NAMES
    fixed_keywords: tuple[str, ...] = Defaults.FIXED_HEAD_KEYWORDS


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    web: WebConfig = field(default_factory=WebConfig)
    balance_sheet: BalanceSheetConfig = field(default_factory=BalanceSheetConfig)
    log_level: str = Defaults.LOG_LEVEL


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml의 '{key}' 섹션은 매핑이어야 합니다")
    return value


def _string_tuple(value: Any, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SettingsLoadError(f"settings.yaml의 '{key}'는 문자열 목록이어야 합니다")
    return tuple(value)


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 지정한 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE
        if not path.exists():
            return AppConfig()
    elif not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except (OSError, yaml.YAMLError) as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    db_section = _section(data, "database")
    db_path = Path(db_section.get("path", Paths.DEFAULT_DB))
    # 상대 경로는 프로젝트 루트 기준
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    web_section = _section(data, "web")
    try:
        port = int(web_section.get("port", Defaults.WEB_PORT))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"web.port가 정수가 아닙니다: {web_section.get('port')}") from e

    bs_section = _section(data, "balance_sheet")
    log_section = _section(data, "logging")

    return AppConfig(
        database=DatabaseConfig(path=db_path),
        web=WebConfig(
            host=str(web_section.get("host", Defaults.WEB_HOST)),
            port=port,
        ),
        balance_sheet=BalanceSheetConfig(
            fixed_heads=_string_tuple(
                bs_section.get("fixed_heads"), "balance_sheet.fixed_heads", Defaults.FIXED_HEAD_NAMES
            ),
            fixed_keywords=_string_tuple(
                bs_section.get("fixed_keywords"),
                "balance_sheet.fixed_keywords",
                Defaults.FIXED_HEAD_KEYWORDS,
            ),
        ),
        log_level=str(log_section.get("level", Defaults.LOG_LEVEL)).upper(),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.database.path

    @property
    def web(self) -> WebConfig:
        """Web 서버 설정"""
        return self.config.web

    @property
    def balance_sheet(self) -> BalanceSheetConfig:
        """재무상태표 분류 설정"""
        return self.config.balance_sheet

    @property
    def log_level(self) -> str:
        """로그 레벨"""
        return self.config.log_level

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
