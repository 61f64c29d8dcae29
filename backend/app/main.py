from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.routers import audit_logs, campaigns, companies, integrations, records
from app.services.integrations.errors import IntegrationError

OPENAPI_TAGS = [
    {"name": "Companies", "description": "Create companies and manage their API keys."},
    {
        "name": "Integrations",
        "description": "Connect CRMs and ad servers, run syncs, forecasts and campaign pushes.",
    },
    {"name": "Campaigns", "description": "Create and manage local campaigns."},
    {"name": "Records", "description": "Browse records imported by sync runs."},
    {"name": "Audit Logs", "description": "Query the audit trail of integration activity."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    debug=settings.DEBUG,
    description=(
        "Ad-inventory integration API. "
        "Sync opportunities, contacts, advertisers and inventory from CRMs and ad servers, "
        "push campaigns to ad servers and run delivery forecasts."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


HTTP_ERROR_CODES = {
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
}


@app.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.code, "detail": exc.message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render auth and routing errors in the same envelope as integration errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
            "detail": exc.detail,
        },
        headers=exc.headers,
    )


app.include_router(companies.router, prefix="/v1/companies", tags=["Companies"])
app.include_router(
    integrations.router,
    prefix="/v1/integrations",
    tags=["Integrations"],
)
app.include_router(campaigns.router, prefix="/v1/campaigns", tags=["Campaigns"])
app.include_router(records.router, prefix="/v1/records", tags=["Records"])
app.include_router(
    audit_logs.router,
    prefix="/v1/audit_logs",
    tags=["Audit Logs"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
