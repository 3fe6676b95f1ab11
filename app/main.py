"""FastAPI 애플리케이션 진입점."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.api import auth, trips
from app.api.dependencies import require_service_secret
from app.core.config import get_settings
from app.core.errors import ErrorCode, StoreUnavailableError, TripboardError
from app.core.logger import get_logger
from app.core.logging_config import configure_logging
from app.core.readiness import collect_readiness_status

configure_logging()
logger = get_logger(__name__)
settings = get_settings()

_HTTP_STATUS_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
    503: ErrorCode.STORE_UNAVAILABLE,
}


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _resolve_docs_mode(mode: str) -> str:
    normalized = (mode or "").strip().lower()
    if normalized in {"disabled", "secret", "public"}:
        return normalized
    logger.warning("Invalid DOCS_MODE, falling back to disabled: %s", mode)
    return "disabled"


def _configure_proxy_headers(app_: FastAPI) -> None:
    if not settings.PROXY_HEADERS_ENABLED:
        return

    trusted_hosts = _split_csv(settings.PROXY_TRUSTED_HOSTS) or ["127.0.0.1"]
    app_.add_middleware(ProxyHeadersMiddleware, trusted_hosts=trusted_hosts)


def _configure_trusted_hosts(app_: FastAPI) -> None:
    trusted_hosts = _split_csv(settings.TRUSTED_HOSTS)
    if not trusted_hosts:
        return

    app_.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


def _configure_cors(app_: FastAPI) -> None:
    origins = _split_csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return

    allow_methods = _split_csv(settings.CORS_ALLOW_METHODS) or ["GET"]
    allow_headers = _split_csv(settings.CORS_ALLOW_HEADERS) or ["Authorization", "Content-Type"]
    allow_credentials = settings.CORS_ALLOW_CREDENTIALS

    if "*" in origins and allow_credentials:
        logger.warning("CORS_ALLOW_ORIGINS='*' with credentials enabled; forcing allow_credentials=false")
        allow_credentials = False

    app_.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """`DB_AUTO_CREATE_TABLES`가 켜져 있으면 시작 시 테이블을 만든다."""
    if settings.DB_AUTO_CREATE_TABLES:
        from app.database import init_db

        init_db()
    yield


docs_mode = _resolve_docs_mode(settings.DOCS_MODE)

app = FastAPI(
    title="Tripboard API",
    lifespan=lifespan,
    docs_url="/docs" if docs_mode == "public" else None,
    redoc_url="/redoc" if docs_mode == "public" else None,
    openapi_url="/openapi.json" if docs_mode == "public" else None,
)

_configure_proxy_headers(app)
_configure_trusted_hosts(app)
_configure_cors(app)

app.include_router(auth.router)
app.include_router(trips.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next) -> Response:
    """기본 보안 헤더를 응답에 추가합니다."""
    response = await call_next(request)
    if not settings.SECURITY_HEADERS_ENABLED:
        return response

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    response.headers.setdefault("Cache-Control", "no-store")
    if settings.ENABLE_HSTS and request.url.scheme == "https":
        response.headers.setdefault("Strict-Transport-Security", f"max-age={settings.HSTS_MAX_AGE_SECONDS}")
    return response


def _error_response(status_code: int, body: dict, headers: dict[str, str] | None = None) -> JSONResponse:
    if status_code == 401:
        headers = {**(headers or {}), "WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(TripboardError)
async def tripboard_error_handler(request: Request, exc: TripboardError) -> JSONResponse:
    """도메인 예외를 `{error, message}` 형식으로 변환합니다."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    elif exc.status_code == 400:
        logger.info("Validation failed on %s %s: %s", request.method, request.url.path, exc.code)
    return _error_response(exc.status_code, exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 본문/쿼리 형식 오류를 400으로 변환합니다."""
    fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
    logger.info("Malformed request on %s %s: %s", request.method, request.url.path, fields)
    return _error_response(
        400,
        {
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": "요청 형식이 올바르지 않습니다.",
            "details": {"fields": fields},
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """프레임워크 HTTP 예외도 같은 에러 형식으로 맞춥니다."""
    if exc.status_code >= 500:
        code = ErrorCode.INTERNAL_ERROR
    else:
        code = _HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.HTTP_ERROR)
    return _error_response(
        exc.status_code,
        {"error": code.value, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
@app.exception_handler(DisconnectionError)
async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """저장소 연결 계열 오류는 일반 오류와 구분해 503으로 응답합니다."""
    logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(503, StoreUnavailableError("저장소에 연결할 수 없습니다.").to_body())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """예상하지 못한 예외를 표준 형식으로 처리합니다."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if settings.EXPOSE_INTERNAL_ERRORS else "내부 서버 오류가 발생했습니다."
    return JSONResponse(status_code=500, content={"error": ErrorCode.INTERNAL_ERROR.value, "message": message})


if docs_mode == "secret":

    @app.get("/openapi.json", include_in_schema=False, dependencies=[Depends(require_service_secret)])
    def openapi_json() -> JSONResponse:
        """서비스 시크릿 인증 후 OpenAPI 스키마를 반환합니다."""
        return JSONResponse(app.openapi())

    @app.get("/docs", include_in_schema=False, dependencies=[Depends(require_service_secret)])
    def swagger_ui() -> Response:
        """서비스 시크릿 인증 후 Swagger UI를 반환합니다."""
        return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{app.title} - Swagger UI")

    @app.get("/redoc", include_in_schema=False, dependencies=[Depends(require_service_secret)])
    def redoc_ui() -> Response:
        """서비스 시크릿 인증 후 ReDoc UI를 반환합니다."""
        return get_redoc_html(openapi_url="/openapi.json", title=f"{app.title} - ReDoc")


@app.get("/health")
def health_check() -> dict:
    """헬스 체크 엔드포인트."""
    return {"status": "ok"}


@app.get("/ready")
async def readiness_check() -> JSONResponse:
    """저장소 준비 상태를 점검합니다. 준비되지 않았으면 503."""
    result = await collect_readiness_status()
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(status_code=status_code, content=result)
