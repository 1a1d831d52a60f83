import base64, json, logging
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from .settings import Settings, settings as default_settings
from .db import make_engine, make_session_factory, init_db
from .catalog import ProductCatalog, load_catalog, load_catalog_or_empty
from .errors import FilesystemError, PersistenceError, ValidationError
from .gemini import GeminiAnnotator
from .records import create_submission, list_submissions, mark_annotated
from .schemas import CatalogReloaded, LeaderboardEntry, UploadResult
from .staging import staged_file

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Email and image are required"
DEFAULT_MIME_TYPE = "application/octet-stream"

router = APIRouter()

def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

def get_annotator(request: Request) -> GeminiAnnotator:
    return request.app.state.annotator

def get_catalog(request: Request) -> ProductCatalog:
    return request.app.state.catalog

def require_submission(email: Optional[str], image: Optional[UploadFile]) -> None:
    if not email or image is None:
        raise ValidationError(MISSING_FIELDS)

async def reject_malformed_form(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    # a text part where the image file should be counts as a missing image
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return PlainTextResponse(MISSING_FIELDS, status_code=400)

@router.get("/healthz")
def healthz():
    return {"status": "ok"}

@router.post("/upload", response_model=UploadResult)
async def upload(
    email: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    annotator: GeminiAnnotator = Depends(get_annotator),
    catalog: ProductCatalog = Depends(get_catalog),
    cfg: Settings = Depends(get_settings),
):
    try:
        require_submission(email, image)
    except ValidationError as e:
        return PlainTextResponse(str(e), status_code=400)

    try:
        data = await image.read()
        mime_type = image.content_type or DEFAULT_MIME_TYPE
        submission_id = await run_in_threadpool(create_submission, db, email, data, mime_type)

        with staged_file(cfg.upload_dir, image.filename, data) as path:
            annotation = await annotator.annotate_image(path, mime_type, f"{email}-image", catalog)
        logger.info("Gemini response for %s:\n%s", submission_id, json.dumps(annotation.raw, indent=2))

        # the caller still gets the annotation if this write fails; the row stays pending
        try:
            await run_in_threadpool(mark_annotated, db, submission_id, annotation.uri)
        except PersistenceError:
            logger.exception("Annotated %s but could not store its gemini uri", submission_id)
    except Exception:
        logger.exception("Error during image upload or generation")
        return PlainTextResponse("Error uploading image", status_code=500)

    return UploadResult(gemini_response=annotation.text, gemini_uri=annotation.uri)

@router.post("/upload-creation", status_code=201)
async def upload_creation(
    email: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    try:
        require_submission(email, image)
    except ValidationError as e:
        return PlainTextResponse(str(e), status_code=400)

    try:
        data = await image.read()
        await run_in_threadpool(create_submission, db, email, data, image.content_type or DEFAULT_MIME_TYPE)
    except Exception:
        logger.exception("Error saving user or image")
        return PlainTextResponse("Internal server error", status_code=500)
    return PlainTextResponse("User and image saved successfully", status_code=201)

@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def leaderboard(db: Session = Depends(get_db)):
    try:
        rows = list_submissions(db)
    except PersistenceError:
        logger.exception("Error fetching leaderboard")
        return PlainTextResponse("Error fetching leaderboard", status_code=500)
    return [
        LeaderboardEntry(
            email=r["email"],
            content_type=r["content_type"],
            image=base64.b64encode(r["image"]).decode("ascii") if r["image"] is not None else None,
            gemini_uri=r["gemini_uri"],
        )
        for r in rows
    ]

@router.post("/catalog/reload", response_model=CatalogReloaded)
def reload_catalog(request: Request, cfg: Settings = Depends(get_settings)):
    try:
        catalog = load_catalog(cfg.product_list_path)
    except FilesystemError:
        logger.exception("Error reloading product list")
        return PlainTextResponse("Error reloading product list", status_code=500)
    request.app.state.catalog = catalog
    return CatalogReloaded(products=len(catalog))

def create_app(cfg: Settings = default_settings) -> FastAPI:
    configure_logging(cfg.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = make_engine(cfg.database_url)
        init_db(engine)
        client = httpx.AsyncClient(timeout=cfg.request_timeout_seconds)
        app.state.session_factory = make_session_factory(engine)
        app.state.annotator = GeminiAnnotator(client, cfg.api_key, cfg.gemini_model, cfg.gemini_base_url)
        app.state.catalog = load_catalog_or_empty(cfg.product_list_path)
        try:
            yield
        finally:
            await client.aclose()
            engine.dispose()

    app = FastAPI(title="Sustainable Showcase", version="1.0.0", lifespan=lifespan)
    app.state.settings = cfg
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, reject_malformed_form)
    app.include_router(router)
    return app

app = create_app()
