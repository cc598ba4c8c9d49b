from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from app.core import config
from app.core.database.engine import init_db
from app.core.errors import AdminError
from app.features.organizations.routes import router as organization_router
from app.features.units.routes import router as unit_router
from app.features.units.routes import organization_router as organization_unit_router
from app.features.roles.routes import router as role_router
from app.features.roles.routes import organization_router as organization_role_router
from app.features.permissions.routes import router as permission_router
from app.features.permissions.routes import organization_router as organization_permission_router
from app.features.data_sharing.routes import router as data_sharing_router
from app.features.data_sharing.routes import organization_router as organization_data_sharing_router
from app.features.users.routes import router as user_router
from app.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="Org Chart RBAC Backend",
    description="Organization units, role hierarchy, permission inheritance and data-sharing rules",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
limiter = Limiter(key_func=get_remote_address, default_limits=[config.RATE_LIMIT])
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.app.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"error": "Invalid request", "category": "validation", "fields": errors}),
    )


@app.exception_handler(AdminError)
async def admin_error_handler(request: Request, exc: AdminError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        log.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.category, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "category": exc.category},
    )


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast", "category": "rate_limit"}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "Org Chart RBAC Backend API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "features": {
            "organizations": "Organizations, ensured by name",
            "units": "Organization unit hierarchy with cascading delete and reparenting",
            "roles": "Role hierarchy with peer data sharing",
            "permissions": "Permission catalogue, direct grants and delegable inheritance",
            "assignments": "Users placed in units with one role per unit",
            "data_sharing": "Source-to-target unit data-sharing rules"
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Organization routes
app.include_router(organization_router, prefix="/organizations", tags=["organizations"])
app.include_router(organization_unit_router, prefix="/organizations/{organization_id}/units")
app.include_router(organization_role_router, prefix="/organizations/{organization_id}/roles")
app.include_router(organization_permission_router, prefix="/organizations/{organization_id}/permissions")
app.include_router(organization_data_sharing_router, prefix="/organizations/{organization_id}/data-sharing")

# Unit routes
app.include_router(unit_router, prefix="/units", tags=["units"])

# Role routes (including grants)
app.include_router(role_router, prefix="/roles", tags=["roles"])

# Permission catalogue routes
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])

# Data-sharing routes
app.include_router(data_sharing_router, prefix="/data-sharing", tags=["data-sharing"])

# User routes
app.include_router(user_router, prefix="/users", tags=["users"])
