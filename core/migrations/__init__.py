"""
스키마 마이그레이션

버전별 마이그레이션을 순서대로 적용하는 실행기와 레지스트리.

사용 예시:
```python
from core.migrations import MigrationRunner, build_registry

runner = MigrationRunner(db, build_registry())
await runner.apply_pending()
```
"""

from core.migrations.registry import AppliedMigration, Migration, MigrationRegistry
from core.migrations.rewrite import RebuildError, rebuild_table
from core.migrations.runner import MigrationRunner


def build_registry() -> MigrationRegistry:
    """등록된 전체 마이그레이션 레지스트리 생성"""
    from core.migrations.versions import MIGRATIONS

    return MigrationRegistry(MIGRATIONS)


__all__ = [
    "AppliedMigration",
    "Migration",
    "MigrationRegistry",
    "MigrationRunner",
    "RebuildError",
    "build_registry",
    "rebuild_table",
]
