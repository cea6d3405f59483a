"""
Pharma Care Backend: back office for a single pharmacy.

ARCHITECTURE:
- FastAPI routes: auth, categories, suppliers, medicines, sale invoices
- Services: sale-invoice transaction, revenue report, PDF/CSV export
- SQLAlchemy DB: source of truth for stock and sales

CONSISTENCY MODEL:
- A sale is one database transaction: invoice, lines and stock decrements
  commit together or not at all
- Stock is only ever decremented by a conditional UPDATE, never read-then-write
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from pharmacare.api.routes import auth, medicine_categories, suppliers, medicines, sale_invoices
from pharmacare.core.config import settings
from pharmacare.core.exceptions import BusinessError
from pharmacare.core.logging_config import configure_logging
from pharmacare.core.rate_limiter import RateLimitMiddleware
from pharmacare.db.init_db import init_db
from pharmacare.services.file_service import upload_dir

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: create tables. Nothing to tear down on shutdown.
    """
    logger.info(f"Starting Pharma Care API ({settings.ENVIRONMENT})")
    init_db()
    yield
    logger.info("Pharma Care API stopped")


app = FastAPI(
    title="Pharma Care API",
    description="Pharmacy back office: inventory, suppliers, sale invoices and revenue reports.",
    version="1.0.0",
    lifespan=lifespan,
)

# SECURITY: Trust only configured hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
        "Idempotency-Key",
    ],
    max_age=600,  # Cache preflight for 10 minutes
    expose_headers=["Content-Type", "Content-Disposition"],
)

# SECURITY: Rate limiting against brute force and request floods
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ==============================================================================
# ERROR ENVELOPE: every failure is {"success": false, "message": ...}
# ==============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Invalid input on {request.method} {request.url.path}: {len(exc.errors())} error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid input data",
            "errors": jsonable_encoder(exc.errors(), exclude={"input", "ctx", "url"}),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    error = BusinessError.server_error(exc)
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "message": error.detail},
    )


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(medicine_categories.router, prefix="/api/medicine-categories", tags=["medicine-categories"])
app.include_router(suppliers.router, prefix="/api/suppliers", tags=["suppliers"])
app.include_router(medicines.router, prefix="/api/medicines", tags=["medicines"])
app.include_router(sale_invoices.router, prefix="/api/sale-invoices", tags=["sale-invoices"])

# Uploaded avatars
app.mount("/files", StaticFiles(directory=str(upload_dir())), name="files")


@app.get("/health")
def health():
    return {"status": "ok"}
