from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api_routers.v1 import api_router
from app.features.lighthouse.services.dispatcher import JobDispatcher
from app.features.lighthouse.services.gateway import AnalysisGateway
from app.features.lighthouse.services.runner import JobRunner
from app.middlewares.cors import PermissiveCORSMiddleware
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import get_logger

logger = get_logger("app")


def build_runner() -> JobRunner:
    return JobRunner()


@asynccontextmanager
async def lifespan(app: FastAPI):
    runner = build_runner()
    dispatcher = JobDispatcher(runner, max_concurrency=settings.MAX_CONCURRENT_JOBS)
    app.state.runner = runner
    app.state.dispatcher = dispatcher
    app.state.gateway = AnalysisGateway(dispatcher)

    logger.info(f"{settings.APP_NAME} started on port {settings.PORT}")
    logger.info(f"Analysis endpoint: POST http://localhost:{settings.PORT}/analyze")
    logger.info(f"Health endpoint: GET http://localhost:{settings.PORT}/health")
    logger.info(f"Target API: {settings.API_URL}")
    logger.info(f"Max concurrent jobs: {settings.MAX_CONCURRENT_JOBS}")

    try:
        yield
    finally:
        logger.info(f"Stopping {settings.APP_NAME}...")
        await dispatcher.shutdown(grace_period=settings.SHUTDOWN_GRACE_PERIOD)
        await runner.collector.aclose()
        logger.info(f"{settings.APP_NAME} stopped cleanly")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Accepts Lighthouse audit requests and runs them in the background",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.add_middleware(PermissiveCORSMiddleware)
    add_exception_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()
