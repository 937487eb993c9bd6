"""
테이블 재작성 (shadow table)

SQLite는 ALTER TABLE로 제약 조건/컬럼 타입을 바꿀 수 없으므로
새 정의로 <table>_new를 만들고 데이터를 옮긴 뒤 교체.

DROP TABLE은 그 테이블의 트리거와 인덱스를 함께 삭제하므로
삭제 전에 sqlite_master에서 DDL을 읽어 두었다가 교체 후 다시 생성.

호출자는 foreign_keys=OFF 상태의 트랜잭션 안에서 호출해야 함
(MigrationRunner가 rebuilds_tables 마이그레이션에 대해 보장).
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class RebuildError(Exception):
    """테이블 재작성 중 데이터 보존 검증 실패"""

    pass


async def capture_dependent_ddl(db: "SQLiteAdapter", table: str) -> list[tuple[str, str, str]]:
    """테이블에 딸린 트리거/인덱스 DDL 조회

    자동 생성 인덱스(UNIQUE 제약 등)는 sql이 NULL이라 제외됨.

    Returns:
        (type, name, sql) 목록
    """
    rows = await db.fetchall(
        """
        SELECT type, name, sql FROM sqlite_master
        WHERE tbl_name = ? AND type IN ('trigger', 'index') AND sql IS NOT NULL
        ORDER BY CASE type WHEN 'index' THEN 0 ELSE 1 END, name
        """,
        (table,),
    )
    return [(row[0], row[1], row[2]) for row in rows]


async def rebuild_table(
    db: "SQLiteAdapter",
    table: str,
    create_sql: str,
    columns: Sequence[str],
    select_exprs: Sequence[str] | None = None,
    extra_ddl: Sequence[str] = (),
) -> int:
    """shadow table 방식으로 테이블 재작성

    순서:
    1. <table>_new 생성 (create_sql의 {table} 자리에 shadow 이름 사용)
    2. 명시적 컬럼 목록으로 전체 행 복사 후 행 수 검증
    3. 기존 테이블 삭제
    4. shadow 이름을 원래 이름으로 변경
    5. 미리 읽어 둔 트리거/인덱스와 extra_ddl 재생성

    Args:
        db: SQLiteAdapter (트랜잭션 진행 중)
        table: 대상 테이블 이름
        create_sql: "CREATE TABLE {table} (...)" 형태의 새 정의
        columns: 새 테이블에 채울 컬럼 목록
        select_exprs: 기존 테이블에서 읽을 식 (None이면 columns와 동일)
        extra_ddl: 재작성 후 추가로 실행할 DDL

    Returns:
        복사한 행 수

    Raises:
        RebuildError: 복사 전후 행 수가 다른 경우
    """
    shadow = f"{table}_new"
    select_exprs = list(select_exprs) if select_exprs is not None else list(columns)
    if len(select_exprs) != len(columns):
        raise ValueError("select_exprs와 columns의 길이가 다릅니다")

    dependent = await capture_dependent_ddl(db, table)

    await db.execute(f"DROP TABLE IF EXISTS {shadow}")
    await db.execute(create_sql.format(table=shadow))

    column_list = ", ".join(columns)
    await db.execute(
        f"INSERT INTO {shadow} ({column_list}) SELECT {', '.join(select_exprs)} FROM {table}"
    )

    source_row = await db.fetchone(f"SELECT COUNT(*) FROM {table}")
    copied_row = await db.fetchone(f"SELECT COUNT(*) FROM {shadow}")
    source_count = source_row[0] if source_row else 0
    copied_count = copied_row[0] if copied_row else 0
    if source_count != copied_count:
        raise RebuildError(
            f"{table} 재작성 중 행 수 불일치: 원본 {source_count}, 복사 {copied_count}"
        )

    await db.execute(f"DROP TABLE {table}")
    await db.execute(f"ALTER TABLE {shadow} RENAME TO {table}")

    for _kind, _name, sql in dependent:
        await db.execute(sql)
    for sql in extra_ddl:
        await db.execute(sql)

    logger.info(
        f"테이블 재작성 완료: {table} ({copied_count}행, 트리거/인덱스 {len(dependent)}개 재생성)"
    )
    return copied_count
