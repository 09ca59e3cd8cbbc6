#main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from db import close_pool
from middleware import RequestContextMiddleware
from routes.admin_exports import router as admin_exports_router
from routes.billing import router as billing_router
from routes.customers import router as customers_router
from routes.health import router as health_router
from routes.orders import router as orders_router
from services.observability import log_context
from settings import validate_env_settings

logger = logging.getLogger("jelantah.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # pool is opened lazily by the postgres store
    close_pool()


def create_app() -> FastAPI:
    validate_env_settings()

    app = FastAPI(title="Jelantah API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(RequestContextMiddleware)

    # -----------------------------
    # ROUTERS
    # -----------------------------

    app.include_router(health_router)
    app.include_router(orders_router)
    app.include_router(billing_router)
    app.include_router(customers_router)
    app.include_router(admin_exports_router)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error %s path=%s", log_context(), request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()
