"""
마이그레이션 레지스트리

버전 순서대로 정렬된 불변 마이그레이션 목록.
생성 시점에 버전 증가/중복 여부를 검증하므로
런타임에 순서가 뒤섞인 레지스트리는 존재할 수 없음.
"""

from collections.abc import Awaitable, Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter


MigrationStep = Callable[["SQLiteAdapter"], Awaitable[None]]


@dataclass(frozen=True)
class Migration:
    """단일 마이그레이션

    Attributes:
        version: 양의 정수, 레지스트리 안에서 엄격히 증가
        name: 고유 이름 (snake_case)
        up: 스키마/데이터 변경 코루틴 (트랜잭션 안에서 호출됨)
        rebuilds_tables: 테이블 재작성 여부 (True면 foreign_keys=OFF로 실행)
    """

    version: int
    name: str
    up: MigrationStep
    rebuilds_tables: bool = False

    @property
    def label(self) -> str:
        """표시용 식별자 (예: 001_rebuild_chart)"""
        return f"{self.version:03d}_{self.name}"


@dataclass(frozen=True)
class AppliedMigration:
    """적용 완료된 마이그레이션 기록 (migrations 테이블 행)"""

    version: int
    name: str
    applied_at: str


class MigrationRegistry:
    """정렬된 마이그레이션 목록

    Args:
        migrations: 버전 오름차순 마이그레이션 목록

    Raises:
        ValueError: 버전이 양수가 아니거나, 증가하지 않거나, 이름이 중복된 경우
    """

    def __init__(self, migrations: Sequence[Migration]):
        previous = 0
        names: set[str] = set()
        for migration in migrations:
            if migration.version <= 0:
                raise ValueError(f"Migration version must be positive: {migration.label}")
            if migration.version <= previous:
                raise ValueError(
                    f"Migration versions must be strictly increasing: "
                    f"{migration.version} after {previous}"
                )
            if not migration.name or migration.name in names:
                raise ValueError(f"Duplicate or empty migration name: {migration.name!r}")
            names.add(migration.name)
            previous = migration.version

        self._migrations: tuple[Migration, ...] = tuple(migrations)

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._migrations)

    def __len__(self) -> int:
        return len(self._migrations)

    def __getitem__(self, index: int) -> Migration:
        return self._migrations[index]

    @property
    def latest_version(self) -> int:
        """최신 버전 (비어 있으면 0)"""
        return self._migrations[-1].version if self._migrations else 0

    def pending_after(self, version: int) -> list[Migration]:
        """지정 버전 이후의 마이그레이션"""
        return [m for m in self._migrations if m.version > version]
