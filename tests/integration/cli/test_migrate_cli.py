"""scripts/migrate.py 통합 테스트

CLI 종료 코드와 DB 상태 확인
"""

import sqlite3
from pathlib import Path

from core.migrations.versions import MIGRATIONS
from scripts.migrate import run


def _applied_versions(db_path: Path) -> list[int]:
    conn = sqlite3.connect(db_path)
    try:
        return [row[0] for row in conn.execute("SELECT version FROM migrations ORDER BY version")]
    finally:
        conn.close()


class TestMigrateCli:
    """migrate CLI 테스트"""

    def test_applies_all(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """settings.yaml의 DB에 전체 적용"""
        exit_code = run(["--config", str(temp_settings_file)])

        assert exit_code == 0
        assert _applied_versions(temp_dir / "ledger.db") == [m.version for m in MIGRATIONS]

    def test_db_override(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """--db로 대상 DB 지정"""
        target = temp_dir / "other.db"

        assert run(["--config", str(temp_settings_file), "--db", str(target)]) == 0
        assert _applied_versions(target)[-1] == MIGRATIONS[-1].version

    def test_status(self, temp_settings_file: Path, capsys) -> None:
        """--status는 적용 상태만 출력"""
        assert run(["--config", str(temp_settings_file)]) == 0
        capsys.readouterr()

        assert run(["--config", str(temp_settings_file), "--status"]) == 0

        output = capsys.readouterr().out
        assert MIGRATIONS[0].label in output
        assert "pending" not in output

    def test_diverged_history_fails(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """이력 불일치 시 종료 코드 1"""
        conn = sqlite3.connect(temp_dir / "ledger.db")
        conn.execute(
            "CREATE TABLE migrations (id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "version INTEGER NOT NULL UNIQUE, name TEXT NOT NULL UNIQUE, "
            "applied_at TEXT NOT NULL DEFAULT (datetime('now')))"
        )
        conn.execute("INSERT INTO migrations (version, name) VALUES (1, 'unknown_step')")
        conn.commit()
        conn.close()

        assert run(["--config", str(temp_settings_file)]) == 1

    def test_missing_config(self, temp_dir: Path) -> None:
        """설정 파일이 없으면 종료 코드 1"""
        assert run(["--config", str(temp_dir / "missing.yaml")]) == 1
