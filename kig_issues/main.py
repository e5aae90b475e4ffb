import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import StorageMode, settings
from .core.exceptions import ConfigurationError
from .core.firebase_init import get_firebase_status, initialize_firebase
from .routers import activity, auth, issues, users, work_groups
from .services.data_access import DataAccessService
from .services.photo_bucket import describe_photo_bucket, open_photo_bucket
from .services.providers import get_data_access, get_storage_mode

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="KIG Issues API",
    description="Community issue reporting and work group coordination",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(issues.router)
app.include_router(work_groups.router)
app.include_router(activity.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.info(f"Rejected {request.method} {request.url.path}: {field or 'request'} - {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"{field}: {message}" if field else message},
    )


@app.on_event("startup")
async def startup_event():
    mode = get_storage_mode()
    logger.info(f"🚀 Starting KIG Issues API in {mode.value} mode")
    if mode is not StorageMode.LIVE:
        return

    if not initialize_firebase():
        raise ConfigurationError("Live storage requested but Firebase could not be initialized")
    if open_photo_bucket() is None:
        logger.warning("⚠️ Photo bucket unavailable - uploads will fail until it is reachable")
    logger.info(f"Firebase status: {get_firebase_status()}")


@app.get("/api/health")
async def health_check(data_access: DataAccessService = Depends(get_data_access)):
    health = {"status": "healthy", "storage_mode": data_access.mode.value}
    if data_access.is_live:
        health["firebase"] = get_firebase_status()
        health["storage"] = describe_photo_bucket()
    return health
