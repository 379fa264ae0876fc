"""GEONIX Contact Service - FastAPI server for the website contact form."""

import os
import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.contact.routes import router as contact_router
from src.shared.mail.config import load_mail_config
from src.shared.mail.routes import router as mail_router
from src.shared.preferences.routes import router as preferences_router

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
    if origin.strip()
]

app = FastAPI(
    title="GEONIX Contact Service",
    description="Website contact form backend: validation, rate limiting and email dispatch",
    version="0.1.0"
)


@app.on_event("startup")
async def startup_event():
    config = load_mail_config()
    if config.is_complete:
        logging.info(f"Mail relay configured: {config.host}:{config.port} (secure={config.secure})")
    else:
        # Contact submissions will answer server_not_configured until this is fixed
        logging.warning(f"Mail relay not configured, missing: {', '.join(config.missing_fields())}")


# Include contact routes
app.include_router(contact_router)

# Include mail diagnostic routes
app.include_router(mail_router)

# Include language preference routes
app.include_router(preferences_router)

# CORS configuration - must be added before exception handlers
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After"],
)


def _cors_headers(request: Request) -> dict:
    """CORS headers for error responses produced outside the middleware."""
    headers = {}
    origin = request.headers.get("origin")
    if origin in CORS_ALLOW_ORIGINS:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Access-Control-Allow-Methods"] = "*"
        headers["Access-Control-Allow-Headers"] = "*"
    return headers


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors in the same {ok, error} shape as the contact route."""
    if isinstance(exc.detail, dict):
        content = {"ok": False, **exc.detail}
    else:
        content = {"ok": False, "error": str(exc.detail)}

    headers = _cors_headers(request)
    if exc.headers:
        headers.update(exc.headers)

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"ok": False, "error": "invalid_request", "detail": jsonable_encoder(exc.errors())},
        headers=_cors_headers(request)
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "internal_error"},
        headers=_cors_headers(request)
    )


@app.get("/")
async def root():
    return {"message": "GEONIX Contact Service is running", "status": "ok"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
