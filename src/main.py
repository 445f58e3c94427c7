import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from engine import get_engine
from history_api import router as history_router
from sessions_api import router as sessions_router
from settings import get_settings
from templates_api import router as templates_router

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = get_engine()
    engine.open()
    try:
        yield
    finally:
        engine.close()


app = FastAPI(title="Workout Session Engine", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def log_internal_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception(
            "Unhandled exception during request: %s %s", request.method, request.url
        )
        raise


# Include routers
app.include_router(templates_router)
app.include_router(sessions_router)
app.include_router(history_router)


@app.get("/")
async def root():
    return {"message": "Welcome to the Workout Session Engine"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
