from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


def error_body(code: str, message: str) -> dict:
    return {"ok": False, "error": message, "code": code}


def rate_limit_headers(request: Request) -> dict:
    return dict(getattr(request.state, "rate_limit_headers", None) or {})


async def handle_client_error(request: Request, exc: ClientError):
    logger.warning(
        f"Client error: code={exc.base_error.code} status={exc.status_code} path={request.url.path}"
    )
    headers = rate_limit_headers(request)
    headers.update(exc.headers or {})
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.base_error.code, exc.base_error.message),
        headers=headers,
    )


async def handle_server_error(request: Request, exc: ServerError):
    logger.error(f"Server error: code={exc.code} path={request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(exc.code, exc.message),
        headers=rate_limit_headers(request),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request: path={request.url.path} errors={len(exc.errors())}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("INVALID_REQUEST", "Invalid request."),
        headers=rate_limit_headers(request),
    )


def create_app(ApplicationConfig) -> FastAPI:
    logging.getLogger("src").setLevel(ApplicationConfig.LOG_LEVEL.upper())

    app = FastAPI(title="Mobile Session Auth API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, applicant_mobile_auth, referrer_mobile_auth

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(applicant_mobile_auth.router, prefix=prefix, tags=["Applicant Mobile Auth"])
    app.include_router(referrer_mobile_auth.router, prefix=prefix, tags=["Referrer Mobile Auth"])
    app.include_router(admin.router, prefix=prefix, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
