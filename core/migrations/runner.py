"""
마이그레이션 실행기

migrations 테이블에 기록된 적용 이력과 레지스트리를 비교해
미적용 마이그레이션을 버전 순서로 하나씩 적용.

각 마이그레이션은 자체 트랜잭션에서 "변경 + 이력 기록"이 원자적으로 수행됨.
실패 시 해당 트랜잭션을 롤백하고 즉시 중단 (이후 마이그레이션은 시도하지 않음).
다음 실행에서는 실패한 마이그레이션부터 다시 시도.
"""

import logging
import sqlite3
from contextlib import AsyncExitStack

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import SchemaMigrationError, StorageError
from core.migrations.base_schema import ensure_base_schema
from core.migrations.registry import AppliedMigration, Migration, MigrationRegistry

logger = logging.getLogger(__name__)


class MigrationRunner:
    """마이그레이션 실행기

    Args:
        db: SQLiteAdapter 인스턴스 (쓰기 연결)
        registry: 마이그레이션 레지스트리

    사용 예시:
    ```python
    runner = MigrationRunner(db, build_registry())
    applied = await runner.apply_pending()
    ```
    """

    def __init__(self, db: SQLiteAdapter, registry: MigrationRegistry):
        self.db = db
        self.registry = registry

    async def applied_migrations(self) -> list[AppliedMigration]:
        """적용 이력 조회 (버전 오름차순)"""
        if not await self.db.table_exists("migrations"):
            return []
        rows = await self.db.fetchall(
            "SELECT version, name, applied_at FROM migrations ORDER BY version"
        )
        return [AppliedMigration(version=row[0], name=row[1], applied_at=row[2]) for row in rows]

    async def current_version(self) -> int:
        """현재 스키마 버전 (적용 이력이 없으면 0)"""
        applied = await self.applied_migrations()
        return applied[-1].version if applied else 0

    async def pending(self) -> list[Migration]:
        """미적용 마이그레이션 목록

        Raises:
            SchemaMigrationError: 적용 이력이 레지스트리의 앞부분과 일치하지 않는 경우
        """
        applied = await self.applied_migrations()
        self._verify_history(applied)
        return self.registry.pending_after(applied[-1].version if applied else 0)

    def _verify_history(self, applied: list[AppliedMigration]) -> None:
        """적용 이력이 레지스트리 접두부와 정확히 일치하는지 검증"""
        if len(applied) > len(self.registry):
            unknown = applied[len(self.registry)]
            raise SchemaMigrationError(
                unknown.version,
                unknown.name,
                "history diverged: applied migration is not in the registry",
            )

        for record, migration in zip(applied, self.registry):
            if record.version != migration.version or record.name != migration.name:
                raise SchemaMigrationError(
                    record.version,
                    record.name,
                    f"history diverged: expected {migration.label}",
                )

    async def apply_pending(self) -> list[AppliedMigration]:
        """미적용 마이그레이션 전체 적용

        Returns:
            이번 실행에서 적용된 마이그레이션 기록 (없으면 빈 목록)

        Raises:
            SchemaMigrationError: 이력 불일치 또는 마이그레이션 실패
        """
        try:
            async with self.db.transaction():
                await ensure_base_schema(self.db)
        except (sqlite3.Error, StorageError) as e:
            raise SchemaMigrationError(None, "base_schema", e) from e

        pending = await self.pending()
        if not pending:
            logger.info(f"스키마 최신 상태: v{self.registry.latest_version}")
            return []

        logger.info(f"미적용 마이그레이션 {len(pending)}개 적용 시작")

        applied: list[AppliedMigration] = []
        for migration in pending:
            applied.append(await self._apply(migration))

        logger.info(f"마이그레이션 완료: v{applied[-1].version}")
        return applied

    async def _apply(self, migration: Migration) -> AppliedMigration:
        """단일 마이그레이션 적용 (트랜잭션 1개)"""
        logger.info(f"마이그레이션 적용: {migration.label}")

        try:
            async with AsyncExitStack() as stack:
                if migration.rebuilds_tables:
                    # PRAGMA foreign_keys는 트랜잭션 밖에서만 적용됨
                    await stack.enter_async_context(self.db.foreign_keys_disabled())
                await stack.enter_async_context(self.db.transaction())

                await migration.up(self.db)

                if migration.rebuilds_tables:
                    await self._check_foreign_keys()

                await self.db.execute(
                    "INSERT INTO migrations (version, name) VALUES (?, ?)",
                    (migration.version, migration.name),
                )
                row = await self.db.fetchone(
                    "SELECT applied_at FROM migrations WHERE version = ?",
                    (migration.version,),
                )
        except Exception as e:
            logger.critical(f"마이그레이션 실패, 롤백: {migration.label}: {e}")
            raise SchemaMigrationError(migration.version, migration.name, e) from e

        return AppliedMigration(
            version=migration.version,
            name=migration.name,
            applied_at=row[0] if row else "",
        )

    async def _check_foreign_keys(self) -> None:
        """재작성 후 외래 키 위반 검사

        Raises:
            sqlite3.IntegrityError: 위반 행이 있는 경우
        """
        violations = await self.db.fetchall("PRAGMA foreign_key_check")
        if violations:
            table, rowid, parent, _fkid = violations[0]
            raise sqlite3.IntegrityError(
                f"foreign key violation after rebuild: {table} rowid={rowid} -> {parent} "
                f"({len(violations)} rows)"
            )
