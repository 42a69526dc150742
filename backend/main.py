"""
SchoolPulse — School Analytics Engine
FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv

# Load environment before route modules read their settings.
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.envelope import failure
from core.errors import AnalyticsError
from core.store import RECORDS_PATH
from routes.analytics import CLASS_AVERAGE_INCLUDES_SELF, router as analytics_router

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SchoolPulse API",
    description=(
        "School analytics — attendance, grade and fee statistics recomputed "
        "from the record store on every request."
    ),
    version="1.0.0",
)

# CORS — allow the React dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AnalyticsError)
async def analytics_error_handler(request: Request, exc: AnalyticsError):
    """Scope errors raised before a computation runs get the same envelope."""
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    envelope = failure(exc)
    return JSONResponse(envelope.to_dict(), status_code=envelope.status_code)


app.include_router(analytics_router, prefix="/api/analytics", tags=["Analytics"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "school_name": SCHOOL_NAME,
    }


@app.get("/api/config")
async def get_config():
    """Return effective server configuration."""
    return {
        "school_name": SCHOOL_NAME,
        "records_path": RECORDS_PATH,
        "class_average_includes_self": CLASS_AVERAGE_INCLUDES_SELF,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
