"""
Fantasy Map Builder FastAPI Application

Main entry point for the application, serving the REST API for worlds,
maps, locations, stamps and travel settings, plus the static front end.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from database import init_db
from logging_config import setup_logging
from logic.errors import TravelError
from server.auth import router as auth_router
from server.locations import router as locations_router
from server.maps import router as maps_router
from server.stamps import router as stamps_router
from server.transfer import router as transfer_router
from server.travel import router as travel_router
from server.worlds import router as worlds_router
from user_context import require_user

# Load environment variables
load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
STATIC_DIR = os.path.join(BASE_DIR, "static")

init_db()

app = FastAPI(title="Fantasy Map Builder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers
app.include_router(auth_router)
for api_router in (
    worlds_router,
    maps_router,
    locations_router,
    stamps_router,
    travel_router,
    transfer_router,
):
    app.include_router(api_router, dependencies=[Depends(require_user)])


# ============================================================
# Error Handling
# ============================================================


@app.exception_handler(TravelError)
async def travel_error_handler(request: Request, exc: TravelError):
    """Report travel computation errors as bad requests."""
    return JSONResponse(
        status_code=400,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)},
    )


@app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "DELETE"], include_in_schema=False)
async def api_not_found(path: str):
    """404 handler for unknown API routes."""
    return JSONResponse(status_code=404, content={"error": "Not found"})


# ============================================================
# Static Files
# ============================================================

if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
