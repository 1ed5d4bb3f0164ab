from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from app.api.auth import router as auth_router
from app.api.contracts import router as contracts_router
from app.api.deps import require_user_auth
from app.api.engineers import router as engineers_router
from app.api.financial import router as financial_router
from app.api.inventory import router as inventory_router
from app.api.labour import router as labour_router
from app.api.material_requests import router as material_requests_router
from app.api.notifications import router as notifications_router
from app.api.projects import router as projects_router
from app.api.usage_logs import router as usage_logs_router
from app.api.users import router as users_router
from app.config import settings
from app.container import shutdown_container
from app.errors import register_error_handlers
from app.logging import configure_logging, get_logger
from app.observability import ObservabilityMiddleware
from app.telemetry import setup_otel

logger = get_logger(__name__)

app = FastAPI(title="sitestock API")

configure_logging()
setup_otel(app)
app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, prefix="/api", dependencies=dependencies)


# Signup, login and the company picker are public; the routers guard the rest.
_include_api_router(auth_router)
_include_api_router(engineers_router)
_include_api_router(users_router, dependencies=[Depends(require_user_auth)])
_include_api_router(projects_router, dependencies=[Depends(require_user_auth)])
_include_api_router(inventory_router, dependencies=[Depends(require_user_auth)])
_include_api_router(material_requests_router, dependencies=[Depends(require_user_auth)])
_include_api_router(usage_logs_router, dependencies=[Depends(require_user_auth)])
_include_api_router(labour_router, dependencies=[Depends(require_user_auth)])
_include_api_router(contracts_router, dependencies=[Depends(require_user_auth)])
_include_api_router(financial_router, dependencies=[Depends(require_user_auth)])
_include_api_router(notifications_router, dependencies=[Depends(require_user_auth)])

app.mount(
    settings.storage_local_url_prefix,
    StaticFiles(directory=settings.storage_local_root, check_dir=False),
    name="uploads",
)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.head("/health")
def head_health():
    return Response(status_code=200)


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.on_event("startup")
def _prepare_storage():
    Path(settings.storage_local_root).mkdir(parents=True, exist_ok=True)
    logger.info("startup env=%s storage_root=%s", settings.app_env, settings.storage_local_root)


@app.on_event("shutdown")
def _dispose_datastore():
    shutdown_container()
