"""
SQLite 어댑터 테스트

SQLiteAdapter 및 관련 함수 테스트.
"""

import asyncio
import sqlite3
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, create_connection
from core.errors import StorageError


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_create_connection(self, tmp_path: Path) -> None:
        """연결 생성 (WAL, foreign_keys)"""
        db_path = tmp_path / "test.db"

        conn = await create_connection(db_path)

        cursor = await conn.execute("PRAGMA journal_mode")
        row = await cursor.fetchone()
        assert row[0].upper() == "WAL"

        cursor = await conn.execute("PRAGMA foreign_keys")
        row = await cursor.fetchone()
        assert row[0] == 1

        await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """부모 디렉토리 생성"""
        db_path = tmp_path / "subdir" / "test.db"

        conn = await create_connection(db_path)

        assert db_path.parent.exists()

        await conn.close()

    @pytest.mark.asyncio
    async def test_readonly_connection_rejects_writes(self, tmp_path: Path) -> None:
        """읽기 전용 연결은 쓰기 불가"""
        db_path = tmp_path / "ro.db"
        async with SQLiteAdapter(db_path) as writer:
            async with writer.transaction():
                await writer.execute("CREATE TABLE t (id INTEGER)")

            async with SQLiteAdapter(db_path, readonly=True) as reader:
                assert await reader.table_exists("t") is True
                with pytest.raises(sqlite3.OperationalError):
                    await reader.execute("INSERT INTO t (id) VALUES (1)")


class TestSQLiteAdapter:
    """SQLiteAdapter 테스트"""

    @pytest_asyncio.fixture
    async def adapter(self, tmp_path: Path) -> SQLiteAdapter:
        """어댑터 픽스처"""
        adapter = SQLiteAdapter(tmp_path / "test.db")
        await adapter.connect()
        await adapter.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, value TEXT)")
        yield adapter
        await adapter.close()

    @pytest.mark.asyncio
    async def test_connect_and_close(self, tmp_path: Path) -> None:
        """연결 및 종료"""
        adapter = SQLiteAdapter(tmp_path / "test.db")

        assert adapter.is_connected is False

        await adapter.connect()
        assert adapter.is_connected is True

        await adapter.close()
        assert adapter.is_connected is False

    @pytest.mark.asyncio
    async def test_execute_without_connection(self, tmp_path: Path) -> None:
        """연결 전 실행 시 RuntimeError"""
        adapter = SQLiteAdapter(tmp_path / "test.db")

        with pytest.raises(RuntimeError, match="Not connected"):
            await adapter.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_transaction_commit(self, adapter: SQLiteAdapter) -> None:
        """트랜잭션 커밋"""
        async with adapter.transaction():
            assert adapter.in_transaction is True
            await adapter.executemany(
                "INSERT INTO items (value) VALUES (?)",
                [("A",), ("B",)],
            )

        assert adapter.in_transaction is False
        rows = await adapter.fetchall("SELECT value FROM items ORDER BY value")
        assert [r[0] for r in rows] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_transaction_rollback(self, adapter: SQLiteAdapter) -> None:
        """예외 발생 시 롤백"""
        with pytest.raises(ValueError):
            async with adapter.transaction():
                await adapter.execute("INSERT INTO items (value) VALUES ('A')")
                raise ValueError("의도적 에러")

        rows = await adapter.fetchall("SELECT value FROM items")
        assert rows == []
        assert adapter.in_transaction is False

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_ddl(self, adapter: SQLiteAdapter) -> None:
        """DDL도 롤백"""
        with pytest.raises(ValueError):
            async with adapter.transaction():
                await adapter.execute("CREATE TABLE temp_table (id INTEGER)")
                raise ValueError("의도적 에러")

        assert await adapter.table_exists("temp_table") is False

    @pytest.mark.asyncio
    async def test_nested_transaction_joins_outer(self, adapter: SQLiteAdapter) -> None:
        """중첩 트랜잭션은 바깥 트랜잭션에 합류 (바깥 실패 시 전체 롤백)"""
        with pytest.raises(ValueError):
            async with adapter.transaction():
                async with adapter.transaction():
                    await adapter.execute("INSERT INTO items (value) VALUES ('inner')")
                await adapter.execute("INSERT INTO items (value) VALUES ('outer')")
                raise ValueError("의도적 에러")

        rows = await adapter.fetchall("SELECT value FROM items")
        assert rows == []

    @pytest.mark.asyncio
    async def test_write_inside_snapshot_rejected(self, adapter: SQLiteAdapter) -> None:
        """읽기 스냅샷 안에서 쓰기 트랜잭션 거부"""
        async with adapter.snapshot():
            with pytest.raises(RuntimeError, match="read snapshot"):
                async with adapter.transaction():
                    pass

    @pytest.mark.asyncio
    async def test_snapshot_does_not_see_pending_write(self, adapter: SQLiteAdapter) -> None:
        """다른 Task의 스냅샷은 커밋 전 쓰기를 볼 수 없음"""
        writer_started = asyncio.Event()
        release_writer = asyncio.Event()

        async def writer() -> None:
            async with adapter.transaction():
                await adapter.execute("INSERT INTO items (value) VALUES ('pending')")
                writer_started.set()
                await release_writer.wait()

        async def reader() -> list:
            async with adapter.snapshot():
                return await adapter.fetchall("SELECT value FROM items")

        writer_task = asyncio.create_task(writer())
        await writer_started.wait()

        reader_task = asyncio.create_task(reader())
        await asyncio.sleep(0.05)
        # 쓰기 트랜잭션이 끝날 때까지 읽기는 대기
        assert reader_task.done() is False

        release_writer.set()
        await writer_task
        rows = await reader_task
        assert [r[0] for r in rows] == ["pending"]

    @pytest.mark.asyncio
    async def test_foreign_keys_disabled_restores(self, adapter: SQLiteAdapter) -> None:
        """foreign_keys 해제 후 원래 값으로 복원"""
        assert await adapter.get_foreign_keys() is True

        async with adapter.foreign_keys_disabled():
            assert await adapter.get_foreign_keys() is False

        assert await adapter.get_foreign_keys() is True

    @pytest.mark.asyncio
    async def test_foreign_keys_restored_on_error(self, adapter: SQLiteAdapter) -> None:
        """실패 경로에서도 foreign_keys 복원"""
        with pytest.raises(ValueError):
            async with adapter.foreign_keys_disabled():
                async with adapter.transaction():
                    await adapter.execute("INSERT INTO items (value) VALUES ('x')")
                    raise ValueError("의도적 에러")

        assert await adapter.get_foreign_keys() is True
        assert await adapter.fetchall("SELECT value FROM items") == []

    @pytest.mark.asyncio
    async def test_foreign_keys_toggle_inside_transaction_rejected(
        self, adapter: SQLiteAdapter
    ) -> None:
        """트랜잭션 안에서는 foreign_keys 변경 불가"""
        async with adapter.transaction():
            with pytest.raises(RuntimeError, match="inside a transaction"):
                async with adapter.foreign_keys_disabled():
                    pass

    @pytest.mark.asyncio
    async def test_table_info_and_triggers(self, adapter: SQLiteAdapter) -> None:
        """테이블 정보 및 트리거 목록"""
        await adapter.execute(
            """
            CREATE TRIGGER items_touch AFTER INSERT ON items
            BEGIN SELECT 1; END
            """
        )

        columns = await adapter.get_table_info("items")
        assert [c["name"] for c in columns] == ["id", "value"]
        assert columns[0]["pk"] is True

        assert await adapter.list_triggers("items") == ["items_touch"]
        assert "CREATE TABLE items" in await adapter.get_table_sql("items")

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        """컨텍스트 매니저"""
        async with SQLiteAdapter(tmp_path / "ctx_test.db") as adapter:
            assert adapter.is_connected is True

        assert adapter.is_connected is False


class TestLockContention:
    """다른 연결이 쓰기 잠금을 잡고 있는 경우"""

    @pytest.mark.asyncio
    async def test_begin_under_lock_is_storage_error(self, tmp_path: Path) -> None:
        """BEGIN IMMEDIATE 대기 시간 초과 → StorageError"""
        db_path = tmp_path / "locked.db"
        async with SQLiteAdapter(db_path) as adapter:
            await adapter.execute("CREATE TABLE items (id INTEGER PRIMARY KEY)")
            await adapter.execute("PRAGMA busy_timeout=100")

            other = sqlite3.connect(db_path, isolation_level=None)
            try:
                other.execute("BEGIN IMMEDIATE")

                with pytest.raises(StorageError) as exc_info:
                    async with adapter.transaction():
                        await adapter.execute("INSERT INTO items (id) VALUES (1)")

                assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
                assert adapter.in_transaction is False
            finally:
                other.execute("ROLLBACK")
                other.close()

            # 잠금 해제 후에는 정상 동작
            async with adapter.transaction():
                await adapter.execute("INSERT INTO items (id) VALUES (1)")
            assert await adapter.fetchone("SELECT COUNT(*) FROM items") == (1,)
