import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from supabase import Client

from cms_rbac.config.settings import Settings, get_settings
from cms_rbac.core.context import AccessContext, build_context
from cms_rbac.core.exceptions import AccessControlError
from cms_rbac.database.supabase_client import create_supabase
from cms_rbac.modules.auth import routes as auth_routes
from cms_rbac.modules.permissions.seeder import migrate_legacy_users, seed_default_roles
from cms_rbac.modules.roles import routes as roles_routes
from cms_rbac.modules.users import routes as users_routes

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "validation": 400,
    "authorization": 403,
    "not_found": 404,
    "conflict": 409,
    "configuration": 500,
}


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


def bootstrap(ctx: AccessContext, settings: Settings) -> None:
    """Seed system roles, then migrate legacy users. Failures are logged, never fatal."""
    if settings.seed_on_startup:
        try:
            seed_default_roles(ctx)
        except Exception:
            logger.exception("Failed to seed default roles")

    if settings.migrate_legacy_users:
        try:
            migrate_legacy_users(ctx)
        except Exception:
            logger.exception("Failed to migrate legacy users")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    # Roles must exist before legacy users can be pointed at them
    bootstrap(app.state.access_context, app.state.settings)
    yield
    logger.info("Application shutdown")


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AccessContext] = None,
    supabase: Optional[Client] = None
) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    if context is None:
        supabase = supabase or create_supabase(settings)
        context = build_context(settings, supabase)

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.limiter = limiter
    app.state.settings = settings
    app.state.supabase = supabase
    app.state.access_context = context
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(AccessControlError)
    async def access_control_exception_handler(request: Request, exc: AccessControlError):
        status_code = STATUS_BY_KIND.get(exc.kind, 500)
        if status_code >= 500:
            logger.error("Access control failure: %s", exc.reason)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        if settings.is_production:
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_routes.router, prefix="/api/v1")
    app.include_router(roles_routes.router, prefix="/api/v1")
    app.include_router(users_routes.router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}

    @app.get("/health")
    @limiter.exempt
    async def health():
        return {"status": "healthy"}

    @app.get("/ready")
    @limiter.exempt
    async def ready():
        """Readiness probe: extend here with DB checks if needed."""
        return {"status": "ready"}

    return app
