from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.api.router import api_router
from app.core.exception_handlers import register_exception_handlers
from app.core.middlewares import logger, register_middleware
from app.db.main import init_db


version = "v1"

description = """
Installment ledger for tour reservations: payment plans, payments and
reconciliation views for the back office.
    """

api_prefix = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("installment-ledger-service started")
    yield


app = FastAPI(
    title="installment-ledger-service",
    description=description,
    version=version,
    license_info={"name": "MIT License", "url": "https://opensource.org/license/mit"},
    openapi_url=f"{api_prefix}/openapi.json",
    docs_url=f"{api_prefix}/docs",
    redoc_url=f"{api_prefix}/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)


register_middleware(app)


app.include_router(api_router, prefix=api_prefix)
