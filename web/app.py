"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
시작 시 DB 마이그레이션을 수행하고, 실패하면 시작을 중단.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.bootstrap import prepare_database
from core.config.loader import get_settings
from core.logging import setup_logging
from web.routes import accounts, health, journals, ledger, statements

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    settings = get_settings()
    setup_logging("web", console_level=settings.log_level, file_level=settings.log_level)

    # 시작 시 - 스키마 마이그레이션 (실패 시 SchemaMigrationError로 시작 중단)
    async with SQLiteAdapter(settings.db_path) as db:
        await prepare_database(db)

    logger.info(f"Web 시작: {settings.db_path}")
    yield
    logger.info("Web 종료")


app = FastAPI(
    title="ledgerbook API",
    description="복식부기 원장 및 재무상태표 API",
    version=health.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(ledger.router)
app.include_router(journals.router)
app.include_router(statements.router)
