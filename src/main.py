from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from src.api.routes import router, ws_router
from src.core.config import settings
from src.core.logging import configure_logging
from src.messaging.producer import producer
from src.caching.redis_client import redis_client
from src.data.database import engine, Base
from src.orders.exceptions import BusinessRuleError, NotFoundError
import logging
import uvicorn

configure_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting up...")

    # Create DB tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.BROKER_ENABLED:
        try:
            await producer.connect()
        except Exception:
            # the producer reconnects on the next publish
            logger.warning("RabbitMQ unavailable at startup, status events will retry on publish")
    await redis_client.connect()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await producer.close()
    await redis_client.close()
    await engine.dispose()

app = FastAPI(title="Order Processing Service", lifespan=lifespan)

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": str(exc)})

@app.exception_handler(BusinessRuleError)
async def business_rule_handler(request: Request, exc: BusinessRuleError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Global exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )

app.include_router(router)
app.include_router(ws_router)

@app.get("/")
async def root():
    return {"message": "Order Processing Service is running"}

def run():
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
