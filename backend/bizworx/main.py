import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .core.settings import get_settings
from .exceptions import AppError
from .routers import API_KEY_SURFACE, ENTITY_ROUTER_MODULES, SESSION_SURFACE
from .routers import auth, business, payroll, public, team, time_clock

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="BizWorx API",
    description="Backend API for BizWorx field-service management",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, details=None) -> JSONResponse:
    content = {"success": False, "error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(422, "Invalid request", exc.errors())


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Internal server error")


# Session surface (JWT)
app.include_router(auth.router, prefix="/api")
app.include_router(business.router, prefix="/api")
app.include_router(team.router, prefix="/api")
app.include_router(time_clock.router, prefix="/api")
app.include_router(payroll.router, prefix="/api")
app.include_router(public.router, prefix="/api")
for module in ENTITY_ROUTER_MODULES:
    app.include_router(module.build_router(SESSION_SURFACE), prefix="/api")

# API-key surface, mounted under both prefixes external integrations use
for prefix in ("/api/gpt", "/api/external"):
    for module in ENTITY_ROUTER_MODULES:
        app.include_router(module.build_router(API_KEY_SURFACE), prefix=prefix)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "BizWorx API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bizworx.main:app", host="0.0.0.0", port=8000, reload=True)
