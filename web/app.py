"""
FastAPI 애플리케이션

라우터 등록, 예외 매핑 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import get_settings
from core.logging import setup_logging
from core.vault.errors import (
    DependencyError,
    NotFoundError,
    ReconciliationError,
    ValidationError,
)

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import health, movements, vaults
from web.routes.health import APP_VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    DB 연결 1개 + VaultLedger 1개를 프로세스 전체에서 공유.
    """
    from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
    from core.vault.ledger import VaultLedger
    from core.vault.store import VaultStore
    from web.dependencies import set_vault_ledger

    settings = get_settings()

    db = SQLiteAdapter(settings.db_path)
    await db.connect()

    # 시작 시 - DB 스키마 자동 초기화
    await init_schema(db)

    ledger = VaultLedger(VaultStore(db), default_vault_name=settings.default_vault_name)
    set_vault_ledger(ledger)
    logger.info(f"Web: VaultLedger 초기화 완료 (mode={settings.mode.value}, db={settings.db_path})")

    try:
        yield
    finally:
        # 종료 시 - 리소스 정리
        set_vault_ledger(None)
        await db.close()
        logger.info("Web: DB 연결 종료 완료")


app = FastAPI(
    title="Cofre API",
    description="현금 금고 입출금 / 잔액 정합 API",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (프론트엔드 개발 서버용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================================================
# 예외 → HTTP 응답 매핑
# =========================================================================


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """입력 검증 실패 → 422 (폼 유지 후 재입력)"""
    return JSONResponse(
        status_code=422,
        content={"error": "validation", "field": exc.field, "detail": str(exc)},
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """대상 없음 → 404"""
    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "entity": exc.entity, "detail": str(exc)},
    )


@app.exception_handler(ReconciliationError)
async def reconciliation_error_handler(request: Request, exc: ReconciliationError) -> JSONResponse:
    """잔액 불일치 → 409 (클라이언트는 /recompute 호출)"""
    logger.error(
        f"Reconciliation error: vault={exc.vault_id}",
        extra={"operation": exc.operation, "movement_id": exc.movement_id},
    )
    return JSONResponse(
        status_code=409,
        content={
            "error": "reconciliation",
            "vault_id": exc.vault_id,
            "movement_id": exc.movement_id,
            "operation": exc.operation,
            "detail": str(exc),
        },
    )


@app.exception_handler(DependencyError)
async def dependency_error_handler(request: Request, exc: DependencyError) -> JSONResponse:
    """저장소 접근 실패 → 503"""
    logger.error(f"Dependency error: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "dependency", "detail": str(exc)},
    )


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(vaults.router)
app.include_router(movements.router)
