"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from web.services.ledger_service import LedgerService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    원장/재무상태표 조회는 WAL 스냅샷으로 쓰기와 동시에 수행.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    분개 전기, 일괄 입력 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


def get_ledger_service(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> LedgerService:
    """조회용 LedgerService"""
    return LedgerService(db, settings.balance_sheet)


def get_ledger_service_write(
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
) -> LedgerService:
    """쓰기용 LedgerService"""
    return LedgerService(db, settings.balance_sheet)
