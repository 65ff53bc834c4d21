from fastapi import FastAPI, UploadFile, File, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
from typing import Optional
import logging
import os

load_dotenv()

from app.identify import identify_from_photo
from app.plantnet import PlantNetError, has_api_key
from app.quotas import enforce_rate_limit
from app.species import load_saplings_or_empty
from app.usage_db import init_db

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

FRONTEND_DIR = os.getenv("FRONTEND_DIR", "./frontend")

init_db()

app = FastAPI(title="Forengers Sapling Identify API", version="1.0")
app.state.saplings = load_saplings_or_empty()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten later
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=exc.headers,
    )


@app.get("/")
def index():
    index_path = os.path.join(FRONTEND_DIR, "index.html")
    if not os.path.isfile(index_path):
        raise HTTPException(status_code=404, detail="Frontend not found.")
    return FileResponse(index_path)


@app.get("/health")
def health(request: Request):
    return {
        "status": "ok",
        "saplingsLoaded": len(request.app.state.saplings),
        "hasPlantnetKey": has_api_key(),
    }


@app.post("/api/identify")
async def identify(request: Request, image: Optional[UploadFile] = File(None)):
    logger.info("/api/identify hit")
    await run_in_threadpool(enforce_rate_limit, request)

    if not has_api_key():
        raise HTTPException(status_code=500, detail="Server configuration error: API key not set")

    if image is None:
        raise HTTPException(status_code=400, detail="No image uploaded")

    if image.content_type and not image.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image.")

    try:
        return await identify_from_photo(image, request.app.state.saplings)
    except HTTPException:
        raise
    except PlantNetError as err:
        return JSONResponse(
            status_code=err.status_code,
            content={"success": False, "error": "Pl@ntNet API error", "details": err.details},
        )
    except Exception as err:
        logger.exception("Identify failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(err)})


if os.path.isdir(FRONTEND_DIR):
    app.mount("/", StaticFiles(directory=FRONTEND_DIR), name="frontend")
