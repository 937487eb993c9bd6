"""
시작 준비

Web/CLI 시작 시 DB 스키마를 최신 버전으로 마이그레이션.
마이그레이션 실패는 치명적 오류로 취급하여 시작을 중단.
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import SchemaMigrationError
from core.migrations import MigrationRegistry, MigrationRunner, build_registry
from core.migrations.registry import AppliedMigration

logger = logging.getLogger(__name__)


async def prepare_database(
    db: SQLiteAdapter,
    registry: MigrationRegistry | None = None,
) -> list[AppliedMigration]:
    """미적용 마이그레이션 적용

    Args:
        db: SQLiteAdapter (쓰기 연결)
        registry: 마이그레이션 레지스트리 (None이면 등록된 전체)

    Returns:
        이번에 적용된 마이그레이션 기록

    Raises:
        SchemaMigrationError: 마이그레이션 실패 (시작 중단)
    """
    runner = MigrationRunner(db, registry or build_registry())
    try:
        applied = await runner.apply_pending()
    except SchemaMigrationError as e:
        logger.critical(f"DB 마이그레이션 실패, 시작 중단: {e}")
        raise

    if applied:
        logger.info(f"DB 준비 완료: {len(applied)}개 마이그레이션 적용")
    return applied
