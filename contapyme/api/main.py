from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from contapyme.api.routes_alerts import router as alerts_router
from contapyme.api.routes_business import router as business_router
from contapyme.api.routes_dashboard import router as dashboard_router
from contapyme.api.routes_f22 import router as f22_router
from contapyme.api.routes_f29 import router as f29_router
from contapyme.api.routes_health import router as health_router
from contapyme.api.routes_inventory import router as inventory_router
from contapyme.api.routes_metrics import router as metrics_router
from contapyme.api.routes_payroll import router as payroll_router
from contapyme.api.routes_transactions import router as transactions_router
from contapyme.core.config import settings
from contapyme.core.errors import register_error_handlers
from contapyme.core.logger import init_logging
from contapyme.core.monitoring import init_monitoring


def create_app() -> FastAPI:
    init_logging()
    init_monitoring()

    # No interactive docs in production
    is_production = settings.is_production
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    register_error_handlers(app)
    app.include_router(business_router, prefix="/business", tags=["business"])
    app.include_router(f29_router, prefix="/f29", tags=["f29"])
    app.include_router(f22_router, prefix="/f22", tags=["f22"])
    app.include_router(payroll_router, prefix="/payroll", tags=["payroll"])
    app.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
    app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
    app.include_router(alerts_router, prefix="/alerts", tags=["alerts"])
    app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)
    return app


app = create_app()
