import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from grading_backend.api.collaborators import CollaboratorRouter
from grading_backend.api.exceptions import to_http_exception
from grading_backend.api.sessions import session_router
from grading_backend.database import init_db
from grading_backend.errors import AUTHENTICATION_ERRORS, CoreError, ErrorKind
from grading_backend.model.types import ResourceKind
from grading_backend.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    if settings.DEBUG_MODE != "production":
        init_db()

    yield

app = FastAPI(lifespan=lifespan)

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CoreError)
async def core_error_handler(request: Request, error: CoreError):
    if error.kind == ErrorKind.STORAGE:
        logger.error(f"{request.method} {request.url.path}: {error.message}")
    elif isinstance(error, AUTHENTICATION_ERRORS):
        logger.info(f"Authentication failed for {request.method} {request.url.path}: {error.code}")

    exception = to_http_exception(error)
    return JSONResponse(status_code=exception.status_code, content=exception.detail, headers=exception.headers)


app.include_router(
    session_router,
    prefix="/auth",
    tags=["auth"],
)

CollaboratorRouter(ResourceKind.TASK).register_routes(app)
CollaboratorRouter(ResourceKind.GROUP).register_routes(app)
