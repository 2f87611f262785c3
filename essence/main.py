# essence/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from essence.core.config import get_settings
from essence.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from essence.models import user as _user_models  # noqa: F401
from essence.models import product as _product_models  # noqa: F401
from essence.models import cart as _cart_models  # noqa: F401
from essence.models import wishlist as _wishlist_models  # noqa: F401
from essence.models import address as _address_models  # noqa: F401
from essence.models import order as _order_models  # noqa: F401

# Routers
from essence.routers.users import router as users_router
from essence.routers.products import router as products_router
from essence.routers.cart import router as cart_router
from essence.routers.favorites import router as favorites_router
from essence.routers.addresses import router as addresses_router
from essence.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: verify DB connectivity and create missing tables.
    """
    logger.info("Startup: connecting to Supabase Postgres...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(favorites_router, prefix=settings.API_V1_STR)
app.include_router(addresses_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "essence-backend"}
