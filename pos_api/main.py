import logging
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from pos_api.core.config import config
from pos_api.core.db.engine import check_database_connection
from pos_api.core.error_handler import (
    database_exception_handler,
    global_exception_handler,
    validation_exception_handler,
)
from pos_api.core.notifications import notification_queue
from pos_api.core.response_interceptor import (
    SuccessResponseInterceptor,
    CustomAPIRoute,
    skip_interceptor,
)
from pos_api.modules.users import router as users_router, auth_router
from pos_api.modules.items import router as items_router, public_router as public_items_router
from pos_api.modules.transactions import router as transactions_router
from pos_api.modules.cash_sessions import router as cash_sessions_router
from pos_api.modules.dashboard import router as dashboard_router
from pos_api.modules.audit_logs import router as audit_logs_router
from pos_api.modules.attendance import router as attendance_router

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting POS API...")
    notification_queue.start()
    yield
    await notification_queue.stop()
    logger.info("POS API stopped")


app = FastAPI(
    title="POS API",
    description="Point-of-sale backend: catalog, checkout, cash sessions and reporting",
    version="1.0.0",
    lifespan=lifespan,
)

# Override the default route class to support skip_interceptor decorator
app.router.route_class = CustomAPIRoute

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add Success Response Interceptor (must be added after CORS)
app.add_middleware(SuccessResponseInterceptor)

# Include routers with /api prefix
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(public_items_router, prefix="/api")
app.include_router(items_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")
app.include_router(cash_sessions_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(attendance_router, prefix="/api")
app.include_router(audit_logs_router, prefix="/api")


@app.get("/health")
@skip_interceptor
async def health() -> dict[str, str]:
    database = "ok" if await check_database_connection() else "unavailable"
    return {"status": "ok", "database": database}
