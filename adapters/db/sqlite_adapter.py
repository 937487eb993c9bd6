"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
쓰기는 단일 연결에서 직렬화된 트랜잭션으로만 수행하고,
읽기 전용 연결은 WAL 스냅샷으로 동시에 조회 가능.

트랜잭션은 명시적으로 관리 (isolation_level=None):
DDL도 트랜잭션 안에서 롤백되어야 마이그레이션이 원자적으로 동작함.
"""

import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.errors import storage_errors

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    if not readonly:
        db_dir = Path(db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    # 연결 생성 (autocommit, 트랜잭션은 BEGIN/COMMIT으로 직접 관리)
    if readonly:
        conn = await aiosqlite.connect(
            f"file:{db_path_str}?mode=ro", uri=True, isolation_level=None
        )
    else:
        conn = await aiosqlite.connect(db_path_str, isolation_level=None)
        # WAL 모드 설정 (쓰기 연결에서만 변경 가능)
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션/스냅샷 컨텍스트 매니저 제공.

    같은 어댑터에서의 트랜잭션과 스냅샷은 asyncio.Lock으로 직렬화되며,
    같은 Task 안에서 중첩되면 바깥 범위에 합류함.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task[Any] | None = None
        self._scope: str | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """열린 트랜잭션 존재 여부"""
        return self._conn is not None and self._conn.in_transaction

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None and self._conn.in_transaction:
            await self._conn.execute("COMMIT")

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None and self._conn.in_transaction:
            await self._conn.execute("ROLLBACK")

    def _owned_by_current_task(self) -> bool:
        try:
            return self._owner is not None and self._owner is asyncio.current_task()
        except RuntimeError:
            return False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저 (쓰기)

        BEGIN IMMEDIATE로 쓰기 잠금을 먼저 확보.
        성공 시 자동 커밋, 예외/취소 시 자동 롤백.

        사용 예시:
        ```python
        async with adapter.transaction():
            await adapter.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```

        Raises:
            RuntimeError: 읽기 스냅샷 안에서 쓰기 트랜잭션을 시작한 경우
            StorageError: 잠금 경합 등으로 BEGIN/COMMIT이 실패한 경우
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        # 같은 Task의 중첩 호출은 바깥 트랜잭션에 합류
        if self._owned_by_current_task():
            if self._scope != "write":
                raise RuntimeError("Cannot start a write transaction inside a read snapshot")
            yield self._conn
            return

        async with self._lock:
            self._owner = asyncio.current_task()
            self._scope = "write"
            try:
                with storage_errors("begin transaction"):
                    await self._conn.execute("BEGIN IMMEDIATE")
                try:
                    yield self._conn
                except BaseException:
                    await self.rollback()
                    raise
                with storage_errors("commit"):
                    try:
                        await self.commit()
                    except sqlite3.Error:
                        await self.rollback()
                        raise
            finally:
                self._owner = None
                self._scope = None

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[aiosqlite.Connection]:
        """읽기 스냅샷 컨텍스트 매니저

        범위 안의 모든 SELECT가 같은 커밋 시점을 보도록 읽기 트랜잭션을 연다.
        쓰기 트랜잭션과 같은 잠금을 사용하므로 작성 중인 분개가 보이지 않음.
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if self._owned_by_current_task():
            yield self._conn
            return

        async with self._lock:
            self._owner = asyncio.current_task()
            self._scope = "read"
            try:
                with storage_errors("begin snapshot"):
                    await self._conn.execute("BEGIN")
                try:
                    yield self._conn
                finally:
                    await self.rollback()
            finally:
                self._owner = None
                self._scope = None

    async def get_foreign_keys(self) -> bool:
        """외래 키 제약 활성화 여부"""
        row = await self.fetchone("PRAGMA foreign_keys")
        return bool(row[0]) if row else False

    @asynccontextmanager
    async def foreign_keys_disabled(self) -> AsyncIterator[None]:
        """외래 키 제약 일시 해제

        SQLite는 트랜잭션 안에서 PRAGMA foreign_keys 변경을 무시하므로
        반드시 트랜잭션 바깥에서 감싸야 함.
        종료 경로(성공/실패/취소)와 무관하게 이전 설정으로 복원.
        """
        if self.in_transaction:
            raise RuntimeError("foreign_keys cannot be toggled inside a transaction")

        previous = await self.get_foreign_keys()
        await self.execute("PRAGMA foreign_keys=OFF")
        try:
            yield
        finally:
            # 실패한 트랜잭션이 남아 있으면 PRAGMA가 무시되므로 먼저 정리
            await self.rollback()
            await self.execute(f"PRAGMA foreign_keys={'ON' if previous else 'OFF'}")
            logger.debug(f"foreign_keys 복원: {previous}")

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def list_triggers(self, table_name: str) -> list[str]:
        """테이블에 걸린 트리거 이름 목록"""
        rows = await self.fetchall(
            "SELECT name FROM sqlite_master WHERE type='trigger' AND tbl_name=? ORDER BY name",
            (table_name,),
        )
        return [row[0] for row in rows]

    async def get_table_sql(self, table_name: str) -> str | None:
        """CREATE TABLE 문 조회"""
        row = await self.fetchone(
            "SELECT sql FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return row[0] if row else None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f'PRAGMA table_info("{table_name}")')

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
