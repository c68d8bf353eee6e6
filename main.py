from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from services.auth_service.router import router as auth_router
from services.cart_service.router import router as cart_router
from services.order_service.router import router as order_router
from services.payment_service.gateway import PaymentGateway, RazorpayGateway
from services.payment_service.router import router as payment_router
from services.product_service.router import admin_router as product_admin_router
from services.product_service.router import router as product_router
from shared.config.database import Database
from shared.config.settings import Settings
from shared.errors import register_error_handlers
from shared.observability import setup_observability
from shared.security import limiter

API_PREFIX = "/api/v1"


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "message": f"Rate limit exceeded: {exc.detail}", "error": "rate_limited"},
    )


def create_app(settings: Optional[Settings] = None, gateway: Optional[PaymentGateway] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title="Storefront", version="1.0.0")
    app.state.settings = settings
    app.state.db = Database(settings.database_url, echo=settings.db_echo)
    app.state.gateway = gateway or RazorpayGateway.from_settings(settings)

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, settings)

    # --- SECURITY SETUP ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_error_handlers(app)

    # Payment routes live under /orders/razorpay; include them before the
    # order router so its /{order_id} routes never shadow them
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(product_router, prefix=API_PREFIX)
    app.include_router(product_admin_router, prefix=API_PREFIX)
    app.include_router(cart_router, prefix=API_PREFIX)
    app.include_router(payment_router, prefix=API_PREFIX)
    app.include_router(order_router, prefix=API_PREFIX)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": settings.service_name, "status": "running"}

    @app.on_event("startup")
    async def startup_event():
        await app.state.db.create_all()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.db.dispose()

    return app


app = create_app()
