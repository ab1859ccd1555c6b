"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from concierge.api import health, order_compiler, orders
from concierge.core.config import settings
from concierge.core.logging import setup_logging
from concierge.db.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Order compilation and matching for hotel concierge dining",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(order_compiler.router, tags=["order-compiler"])
app.include_router(orders.router, tags=["orders"])


def run() -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("concierge.main:app", host=settings.host, port=settings.port)
