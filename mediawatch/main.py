import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mediawatch.core.config import settings
from mediawatch.core.exceptions import InsufficientTrainingDataError, ModelTrainingError, StoreError
from mediawatch.core.logging import setup_logging
from mediawatch.api.v1.endpoints.alerts import router as alerts_router
from mediawatch.api.v1.endpoints.posts import router as posts_router
from mediawatch.api.v1.endpoints.sentiment import router as sentiment_router
from mediawatch.api.v1.endpoints.trends import router as trends_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    setup_logging(settings.log_level)

    if settings.store_backend == "neo4j":
        from mediawatch.services.neo4j_store import Neo4jConnection
        try:
            if Neo4jConnection.verify_connectivity():
                Neo4jConnection.init_constraints()
                logger.info("Neo4j connection established and constraints initialized")
            else:
                logger.warning("Neo4j connection failed - storage calls will fail")
        except StoreError as e:
            logger.warning(f"Neo4j initialization error: {e}")

        yield

        Neo4jConnection.close()
        logger.info("Neo4j connection closed")
    else:
        yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sentiment_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(trends_router, prefix="/api/v1")
app.include_router(alerts_router, prefix="/api/v1")


@app.exception_handler(InsufficientTrainingDataError)
async def insufficient_training_data_handler(request: Request, exc: InsufficientTrainingDataError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ModelTrainingError)
async def model_training_handler(request: Request, exc: ModelTrainingError):
    logger.error(f"Retraining failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store error: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok"}
