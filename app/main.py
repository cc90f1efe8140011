import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path

import crud
import database
import formats
import models
import schemas
from dotenv import load_dotenv
from exceptions import NotFoundError, ShortLinkError
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse

load_dotenv(Path(__file__).parent.parent / ".env")

ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
VERSION = "1.0"
START_TIME = time.monotonic()

# --- Logging ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("shortlinks")

# --- DB tables ---
models.Base.metadata.create_all(bind=database.engine)

app = FastAPI(
    title="Short Links",
    description="Shorten URLs, redirect visitors and count clicks.",
    version="1.0.0",
)

# --- CORS (allow frontend dev servers, etc.) ---
origins = ["*"] if ENVIRONMENT == "dev" else [
    os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Errors -> {"error": ...} ---
@app.exception_handler(ShortLinkError)
async def short_link_error_handler(request: Request, exc: ShortLinkError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

# ---- Serve frontend (same origin) ----
FRONTEND_DIR = Path(__file__).parent / "frontend"

@app.get("/", include_in_schema=False)
def serve_index():
    return FileResponse(FRONTEND_DIR / "index.html")

@app.get("/code/{code}", include_in_schema=False)
def serve_stats(code: str):
    return FileResponse(FRONTEND_DIR / "code.html")

# Health check (useful for uptime monitors & load balancers)
@app.get("/healthz", response_model=schemas.HealthOut, response_model_exclude_none=True)
def healthz(db=Depends(database.get_db)):
    try:
        database.ping(db)
    except Exception:
        logger.exception("Health check failed")
        body = schemas.HealthOut(
            ok=False, version=VERSION, database="disconnected", error="Database connection failed",
        )
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    return schemas.HealthOut(
        ok=True,
        version=VERSION,
        uptime=f"{int(time.monotonic() - START_TIME)}s",
        database="connected",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )

# ---------- API ----------
ERROR_RESPONSES = {status: {"model": schemas.ErrorOut} for status in (400, 404, 409, 500)}

@app.get("/api/links", response_model=list[schemas.LinkOut])
def list_links(db=Depends(database.get_db)):
    return crud.get_links(db)

@app.post("/api/links", response_model=schemas.LinkOut, status_code=201, responses=ERROR_RESPONSES)
def create_link(link_in: schemas.LinkCreate, db=Depends(database.get_db)):
    link = crud.create_link(db, link_in)
    logger.info("Created link %s -> %s", link.code, link.target_url)
    return link

@app.get("/api/links/{code}", response_model=schemas.LinkOut, responses=ERROR_RESPONSES)
def get_link(code: str, db=Depends(database.get_db)):
    link = crud.get_link(db, code)
    if not link:
        raise NotFoundError(crud.LINK_NOT_FOUND)
    return link

@app.delete("/api/links/{code}", response_model=schemas.MessageOut, responses=ERROR_RESPONSES)
def delete_link(code: str, db=Depends(database.get_db)):
    if not crud.delete_link(db, code):
        raise NotFoundError(crud.LINK_NOT_FOUND)
    logger.info("Deleted link %s", code)
    return {"ok": True, "detail": f"Link '{code}' deleted"}

# Redirect /{code}; count first, then redirect
@app.get("/{code}", include_in_schema=False)
def redirect_code(code: str, db=Depends(database.get_db)):
    if formats.is_reserved_path(code):
        return JSONResponse(status_code=404, content={"error": "Not found"})
    target_url = crud.resolve_link(db, code)
    logger.debug("Redirecting %s -> %s", code, target_url)
    return RedirectResponse(url=target_url, status_code=302)
