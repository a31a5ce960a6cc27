# cart_api/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from cart_api.data.database import init_db
from cart_api.api.routers import carts, health, operations
from cart_api.services.money import MoneyFormatter
from cart_api.services.payment_client import StripeClient
from cart_api.utils.settings import CORS_ORIGINS, CURRENCY_CODE, MONEY_LOCALE
from cart_api.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database...")
    init_db()
    yield
    logger.info("Cart API shutting down")


def create_app(payment_client=None, money: MoneyFormatter | None = None) -> FastAPI:
    app = FastAPI(
        title="Cart API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # waluta i klient platnosci ustawiane raz, przy starcie
    app.state.money = money or MoneyFormatter(CURRENCY_CODE, MONEY_LOCALE)
    app.state.payment_client = payment_client or StripeClient()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # /api zwraca bledy walidacji w swojej kopercie, reszta domyslnie
    app.add_exception_handler(RequestValidationError, operations.request_validation_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(operations.router)
    app.include_router(carts.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
