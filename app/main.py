import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis import RedisError

from .config import ALLOWED_ORIGINS, DATABASE_URL, RATE_LIMIT_ENABLED
from .database import Database
from .domain.delivery.router import public_router as delivery_public_router
from .domain.delivery.router import router as cep_ranges_router
from .domain.orders.router import public_router as orders_public_router
from .domain.orders.router import router as orders_router
from .domain.pickup_slots.router import public_router as pickup_slots_public_router
from .domain.pickup_slots.router import router as pickup_slots_router
from .domain.schedule.router import router as schedule_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    database = Database(DATABASE_URL)
    database.create_all()
    app.state.database = database
    logger.info("Database tables created successfully")

    if RATE_LIMIT_ENABLED:
        try:
            from .rate_limiter import get_redis_client

            get_redis_client()  # Connection test
        except RedisError as e:
            logger.warning(f"Redis unavailable at startup - public endpoints will answer 503: {e}")
    else:
        logger.warning("Rate limiting DISABLED - only use in development!")

    yield

    logger.info("Application shutting down...")
    database.dispose()


app = FastAPI(title="Storefront Orders API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed bodies and parameters are a 400. Problems with the Authorization
    header are reported as 401 instead.
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Public catalog routes
app.include_router(orders_public_router)
app.include_router(delivery_public_router)
app.include_router(pickup_slots_public_router)

# Admin routes
app.include_router(orders_router)
app.include_router(pickup_slots_router)
app.include_router(schedule_router)
app.include_router(cep_ranges_router)


@app.get("/health")
def health():
    return {"status": "healthy"}
