import logging
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

# Load environment variables from .env file before settings are read
load_dotenv()

from amc_receipts.api.analytics import router as analytics_router
from amc_receipts.api.audits import router as audits_router
from amc_receipts.api.committees import router as committees_router
from amc_receipts.api.dashboard import router as dashboard_router
from amc_receipts.api.receipts import router as receipts_router
from amc_receipts.api.users import router as users_router
from amc_receipts.routes.auth import router as auth_router
from amc_receipts.utils.helpers.exceptions import BackendError, ConfigurationError, ReceiptSubmissionError
from amc_receipts.utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="AMC Receipt Service",
        description="Role-scoped entry, verification and reporting of agricultural market committee trade receipts.",
        version="0.1.0",
    )

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
        logger.error("Backend %s failed on %s: %s", exc.operation or "call", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc), "error": "fetch_failed"},
        )

    @app.exception_handler(ReceiptSubmissionError)
    async def submission_error_handler(request: Request, exc: ReceiptSubmissionError) -> JSONResponse:
        code = status.HTTP_502_BAD_GATEWAY if exc.retryable else status.HTTP_422_UNPROCESSABLE_ENTITY
        return JSONResponse(
            status_code=code,
            content={
                "detail": str(exc),
                "error": "submission_failed",
                "retryable": exc.retryable,
                "payload": exc.payload,
            },
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "error": "configuration"},
        )

    @app.get("/health", tags=["health"])
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(committees_router)
    app.include_router(receipts_router)
    app.include_router(analytics_router)
    app.include_router(users_router)
    app.include_router(audits_router)

    logger.info("AMC receipt service initialized")
    return app


app = create_app()
