"""
core/migrations/registry.py 테스트

레지스트리 생성 시 버전/이름 검증과 등록된 마이그레이션 목록 확인
"""

import pytest

from core.migrations import build_registry
from core.migrations.registry import Migration, MigrationRegistry


async def _noop(db) -> None:
    return None


class TestMigration:
    """Migration 데이터클래스 테스트"""

    def test_label(self) -> None:
        """표시용 식별자"""
        migration = Migration(version=7, name="add_guards", up=_noop)

        assert migration.label == "007_add_guards"
        assert migration.rebuilds_tables is False


class TestMigrationRegistry:
    """MigrationRegistry 검증 테스트"""

    def test_sorted_registry(self) -> None:
        """정상 레지스트리"""
        registry = MigrationRegistry([
            Migration(1, "first", _noop),
            Migration(2, "second", _noop),
            Migration(5, "fifth", _noop),
        ])

        assert len(registry) == 3
        assert registry.latest_version == 5
        assert [m.version for m in registry.pending_after(1)] == [2, 5]
        assert registry.pending_after(5) == []

    def test_empty_registry(self) -> None:
        """빈 레지스트리는 버전 0"""
        assert MigrationRegistry([]).latest_version == 0

    def test_rejects_non_positive_version(self) -> None:
        """0 이하 버전 거부"""
        with pytest.raises(ValueError, match="positive"):
            MigrationRegistry([Migration(0, "zero", _noop)])

    def test_rejects_out_of_order(self) -> None:
        """감소하는 버전 거부"""
        with pytest.raises(ValueError, match="strictly increasing"):
            MigrationRegistry([Migration(2, "b", _noop), Migration(1, "a", _noop)])

    def test_rejects_duplicate_version(self) -> None:
        """중복 버전 거부"""
        with pytest.raises(ValueError, match="strictly increasing"):
            MigrationRegistry([Migration(1, "a", _noop), Migration(1, "b", _noop)])

    def test_rejects_duplicate_name(self) -> None:
        """중복 이름 거부"""
        with pytest.raises(ValueError, match="Duplicate"):
            MigrationRegistry([Migration(1, "same", _noop), Migration(2, "same", _noop)])


class TestBuildRegistry:
    """등록된 마이그레이션 목록 테스트"""

    def test_versions_contiguous(self) -> None:
        """1부터 연속된 버전"""
        registry = build_registry()

        assert [m.version for m in registry] == list(range(1, len(registry) + 1))

    def test_rebuild_flags(self) -> None:
        """테이블 재작성 마이그레이션 표시"""
        registry = build_registry()
        rebuilds = {m.name for m in registry if m.rebuilds_tables}

        assert rebuilds == {
            "rebuild_chart_with_parent_and_type_check",
            "rebuild_account_code_as_text",
        }
