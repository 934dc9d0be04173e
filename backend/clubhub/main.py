import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.middleware.trustedhost import TrustedHostMiddleware

from clubhub.api.router import router
from clubhub.core.config import settings
from clubhub.core.errors import install_error_handlers
from clubhub.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ClubHub API",
    version="0.1.0",
)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


allowed_hosts = _split_csv(settings.ALLOWED_HOSTS) or ["*"]
app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

cors_origins = _split_csv(settings.CORS_ORIGINS)
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response: Response = await call_next(request)
    if settings.SECURITY_HEADERS_ENABLED:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.ENV != "dev":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


install_error_handlers(app)
app.include_router(router)

logger.info("clubhub api ready (env=%s)", settings.ENV)


@app.get("/health")
def health():
    return {"ok": True}
