import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import settings
from .database import engine
from .errors import DatastoreError, StudentNestError
from .middleware_request_id import RequestIDMiddleware
from .models import Base
from .routers import auth as auth_router
from .routers import landlord as landlord_router
from .routers import notifications as notifications_router
from .routers import student as student_router


log = logging.getLogger(__name__)

REQ = Counter("studentnest_http_requests_total", "HTTP requests", ["method", "path", "status"])
REQ_DURATION = Histogram(
    "studentnest_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)


def _error_response(exc: StudentNestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.code, "message": exc.message})


def create_app() -> FastAPI:
    app = FastAPI(title="StudentNest API", version=__version__, docs_url="/docs")

    allowed_origins = settings.ALLOWED_ORIGINS or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    if settings.AUTO_CREATE_SCHEMA:
        Base.metadata.create_all(bind=engine)

    @app.exception_handler(StudentNestError)
    async def _domain_error(request: Request, exc: StudentNestError):
        req_id = getattr(request.state, "request_id", None)
        if isinstance(exc, DatastoreError):
            log.error("datastore_error path=%s request_id=%s", request.url.path, req_id)
        else:
            log.info("request_rejected code=%s path=%s request_id=%s", exc.code, request.url.path, req_id)
        return _error_response(exc)

    @app.exception_handler(SQLAlchemyError)
    async def _sqlalchemy_error(request: Request, exc: SQLAlchemyError):
        log.exception("unhandled datastore failure path=%s request_id=%s", request.url.path, getattr(request.state, "request_id", None))
        return _error_response(DatastoreError())

    @app.get("/health")
    def health():
        with engine.connect() as conn:
            conn.execute(text("select 1"))
        return {"status": "ok", "env": settings.ENV}

    @app.middleware("http")
    async def _metrics_mw(request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start
        route = getattr(request.scope.get("route"), "path", None) or request.url.path
        REQ.labels(request.method, route, str(response.status_code)).inc()
        REQ_DURATION.labels(request.method, route).observe(duration)
        return response

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(auth_router.router)
    app.include_router(landlord_router.router)
    app.include_router(student_router.router)
    app.include_router(notifications_router.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
