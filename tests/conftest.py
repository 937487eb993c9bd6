"""
pytest 공통 fixture 정의

임시 디렉토리의 SQLite DB를 테스트마다 새로 생성.
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.bootstrap import prepare_database
from core.config.loader import Settings
from core.ledger import ChartRepository, LedgerProjector, PostingEngine


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
database:
  path: {(temp_dir / "ledger.db").as_posix()}

logging:
  level: debug

web:
  host: 0.0.0.0
  port: 9000

balance_sheet:
  fixed_heads:
    - Fixed Asset
    - Long Term Loans
  fixed_keywords:
    - machinery
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def raw_db(tmp_path: Path) -> SQLiteAdapter:
    """마이그레이션하지 않은 빈 DB"""
    adapter = SQLiteAdapter(tmp_path / "raw.db")
    await adapter.connect()
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> SQLiteAdapter:
    """최신 스키마로 마이그레이션된 DB"""
    adapter = SQLiteAdapter(tmp_path / "ledger.db")
    await adapter.connect()
    await prepare_database(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def charts(db: SQLiteAdapter) -> ChartRepository:
    """ChartRepository 인스턴스"""
    return ChartRepository(db)


@pytest.fixture
def engine(db: SQLiteAdapter) -> PostingEngine:
    """PostingEngine 인스턴스"""
    return PostingEngine(db)


@pytest.fixture
def projector(db: SQLiteAdapter) -> LedgerProjector:
    """LedgerProjector 인스턴스"""
    return LedgerProjector(db)


@pytest_asyncio.fixture
async def book(charts: ChartRepository) -> dict[str, int]:
    """기본 계정 세트 (이름 → account id)

    기본 main head(마이그레이션 008) 아래에 계정 생성.
    """
    heads = {chart.name: chart.id for chart in await charts.list_charts()}

    accounts = {
        "Cash": heads["Current Asset"],
        "Machinery": heads["Fixed Asset"],
        "Accounts Payable": heads["Current Liability"],
        "Bank Loan": heads["Fixed Liability"],
        "Capital": heads["Equity"],
        "Sales": heads["Revenue"],
        "Rent": heads["Expense"],
    }

    ids: dict[str, int] = {}
    for name, chart_id in accounts.items():
        account = await charts.create_account(chart_id, name)
        ids[name] = account.id
    return ids
