"""
스키마 마이그레이션 CLI

사용법:
    python -m scripts.migrate
    python -m scripts.migrate --db data/ledgerbook.db
    python -m scripts.migrate --status
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.bootstrap import prepare_database
from core.config.loader import SettingsLoadError, get_settings
from core.errors import SchemaMigrationError
from core.logging import setup_logging
from core.migrations import MigrationRunner, build_registry

logger = logging.getLogger(__name__)


async def show_status(db_path: Path) -> None:
    """적용 이력과 미적용 마이그레이션 출력"""
    registry = build_registry()
    async with SQLiteAdapter(db_path) as db:
        runner = MigrationRunner(db, registry)
        applied = await runner.applied_migrations()
        applied_versions = {record.version for record in applied}

    for migration in registry:
        state = "applied" if migration.version in applied_versions else "pending"
        print(f"{migration.label:<55} {state}")


async def main(db_path: Path) -> None:
    """마이그레이션 실행

    Args:
        db_path: DB 파일 경로
    """
    logger.info(f"마이그레이션 시작: {db_path}")

    async with SQLiteAdapter(db_path) as db:
        applied = await prepare_database(db)

    if applied:
        for record in applied:
            logger.info(f"  적용: {record.version:03d}_{record.name}")
    logger.info("마이그레이션 완료")


def run(argv: list[str] | None = None) -> int:
    """CLI 진입점

    Returns:
        종료 코드 (0: 성공, 1: 마이그레이션/설정 실패)
    """
    parser = argparse.ArgumentParser(description="ledgerbook 스키마 마이그레이션")
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로 (기본: settings.yaml)")
    parser.add_argument("--config", type=Path, default=None, help="settings.yaml 경로")
    parser.add_argument("--status", action="store_true", help="적용 상태만 출력")
    args = parser.parse_args(argv)

    try:
        settings = get_settings(args.config)
    except SettingsLoadError as e:
        print(f"설정 로드 실패: {e}", file=sys.stderr)
        return 1

    setup_logging("migrate", console_level=settings.log_level)
    db_path = args.db or settings.db_path

    try:
        if args.status:
            asyncio.run(show_status(db_path))
        else:
            asyncio.run(main(db_path))
    except SchemaMigrationError:
        # prepare_database에서 CRITICAL로 기록됨
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(run())
