import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from teklifsatis.config import settings
from teklifsatis.exceptions import DomainError
from teklifsatis.logging_config import setup_logging
from teklifsatis.rate_limit import limiter
from teklifsatis.routers import commissions_api, payments_api, quotes_api, sales_api, tickets_api

# Loglama sistemini baslat (uygulama ayaga kalkmadan once)
setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Teklif, satis, tahsilat ve teknik servis teklif sistemi",
    version="0.1.0",
)

logger.info("%s uygulamasi baslatiliyor...", settings.APP_NAME)

# slowapi'yi FastAPI state'e bagla
app.state.limiter = limiter

# ---------------------------------------------------------------------------
# CORS Ayarlari
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


# ---------------------------------------------------------------------------
# Guvenlik Header'lari Middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Her yanita guvenlik header'lari ekler."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)


# ---------------------------------------------------------------------------
# Hata Handler'lari
# ---------------------------------------------------------------------------
@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Rate limit asildiginda kullaniciya uygun hata mesaji dondur."""
    logger.warning("Rate limit asildi: %s %s", request.method, request.url)
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Cok fazla istek gonderdiniz. Lutfen biraz bekleyip tekrar deneyin.",
            "retry_after": exc.detail,
        },
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Alan hatalari: hata turu ve mesaj JSON olarak doner."""
    logger.warning(
        "%s (%d): %s %s - %s",
        type(exc).__name__, exc.status_code, request.method, request.url.path, exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("HTTP %d hatasi: %s %s", exc.status_code, request.method, request.url)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Yakalanmamis hatalar loglanir, istemciye genel mesaj doner."""
    logger.error("Yakalanmamis hata: %s %s", request.method, request.url, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Beklenmeyen bir hata olustu"})


# API Router'lari
app.include_router(quotes_api.router, prefix="/api/v1/quotes", tags=["Teklifler"])
app.include_router(sales_api.router, prefix="/api/v1/sales", tags=["Satislar"])
app.include_router(payments_api.router, prefix="/api/v1/payments", tags=["Gelen Odemeler"])
app.include_router(commissions_api.router, prefix="/api/v1/commissions", tags=["Primler"])
app.include_router(tickets_api.router, prefix="/api/v1/tickets", tags=["Teknik Servis"])


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok", "app": settings.APP_NAME}
