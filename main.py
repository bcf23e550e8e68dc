"""
DancyMeals FastAPI Application
Main entry point: multi-tenant storefront, session cart and checkout
"""

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio

from api.routes import health, auth, admin_tenants, storefront, cart, checkout
from domain.models import init_database
from app.config import settings
from api.dependencies import resolve_tenant_context
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    dancymeals_exception_handler,
    checkout_redirect_handler,
    general_exception_handler,
)
from app.exceptions import CheckoutRedirect, DancyMealsError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("dancymeals.main")


async def _create_schema() -> None:
    """Create tables, retrying while the database container comes up"""
    attempts = settings.db_init_attempts
    for attempt in range(1, attempts + 1):
        try:
            await anyio.to_thread.run_sync(init_database)
        except Exception as exc:
            if attempt == attempts:
                _logger.error(f"db_init_failed attempts={attempt} error={exc}")
                raise
            _logger.warning(f"db_init_retry attempt={attempt}/{attempts} error={exc}")
            await anyio.sleep(settings.db_init_delay_sec)
        else:
            _logger.info(f"db_init_ok attempt={attempt}")
            return


@asynccontextmanager
async def lifespan(app: FastAPI):
    _logger.info(
        f"Starting DancyMeals in {settings.environment.value} mode "
        f"(main domain {settings.main_domain})"
    )
    await _create_schema()
    try:
        yield
    finally:
        _logger.info("Shutting down DancyMeals")


# Every request resolves its tenant from the Host header before routing
docs_enabled = not settings.is_production()
app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    dependencies=[Depends(resolve_tenant_context)],
    openapi_url=f"{settings.api_prefix}/openapi.json" if docs_enabled else None,
    docs_url=f"{settings.api_prefix}/docs" if docs_enabled else None,
    redoc_url=f"{settings.api_prefix}/redoc" if docs_enabled else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Signed cookie session holding the cart, checkout state and user id
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.is_production(),
)

app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(CheckoutRedirect, checkout_redirect_handler)
app.add_exception_handler(DancyMealsError, dancymeals_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

for module in (health, auth, admin_tenants, storefront, cart, checkout):
    app.include_router(module.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
