"""
AutoDash - schema-free analytics dashboard backend.

FastAPI application wiring: logging, middleware, CORS and routers.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .api import analysis, app_settings, datasets
from .api.app_settings import ai_status
from .middleware import ErrorHandlerMiddleware, RequestLoggerMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("autodash")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
)

# Last added runs first: errors are caught inside the request logger so the
# resulting 500 is still logged.
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(datasets.router, prefix=settings.API_PREFIX)
app.include_router(analysis.router, prefix=settings.API_PREFIX)
app.include_router(app_settings.router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "ai": ai_status(),
    }


logger.info("%s v%s started (api prefix %s)", settings.APP_NAME, settings.APP_VERSION, settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("autodash.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
