import time
import logging
from typing import Any, Dict, Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Depends, Body
from fastapi.middleware.cors import CORSMiddleware

from trailing_spaces.config import MatchSettings, configure_logging, load_config, merge_settings
from trailing_spaces.document import TextDocument
from trailing_spaces.errors import SnapshotError, TrailingSpacesError
from trailing_spaces.finder import build_pattern, should_ignore
from trailing_spaces.runner import ENGINE_VERSION, region_to_json
from trailing_spaces.session import TrailingSpaces
from trailing_spaces.types import Position, Region

from .models import RegionModel, RegionsRequest, RegionsResponse, TrimRequest, TrimResponse
from .settings import settings
from .auth import get_current_user, UserContext

logger = logging.getLogger(__name__)

# Matching settings shared by all requests, loaded on first use
_match_settings: Optional[MatchSettings] = None

session_logger = logging.getLogger("trailing_spaces.service")

SNAPSHOT_REQUIRED = "A snapshot is required to trim modified lines only"


def get_match_settings() -> MatchSettings:
    """Return the shared matching settings, loading them on first use."""
    global _match_settings
    if _match_settings is None:
        _match_settings = load_config(settings.config_path)
        logger.info(f"Matching settings loaded from {settings.config_path or 'defaults'}")
    return _match_settings


def reset_match_settings() -> None:
    """Forget the shared settings so the next request reloads them."""
    global _match_settings
    _match_settings = None


def _no_disk_snapshot(path: str) -> str:
    # Saved copies only ever come with the request
    raise SnapshotError(path, LookupError("no snapshot in request"))


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings at startup so a broken configuration fails fast."""
    match_settings = get_match_settings()
    if settings.debug:
        configure_logging("log")
    else:
        configure_logging(settings.log_level or match_settings.log_level)
    yield
    reset_match_settings()


app = FastAPI(
    title="Trailing Spaces",
    lifespan=lifespan
)

# If no origins configured, allow localhost and editor webviews
allowed_origins = settings.allowed_origins if settings.allowed_origins else [
    "http://localhost:*",
    "http://127.0.0.1:*",
    "vscode-webview://*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-API-Key", "Authorization"],
)


@app.get("/health")
def health():
    """
    Health check endpoint - no authentication required.
    """
    return {
        "status": "ok",
        "version": ENGINE_VERSION,
        "engine_version": ENGINE_VERSION,
        "timestamp": int(time.time()),
        "auth_required": bool(settings.api_keys),
    }


def _session_for(overrides: Dict[str, Any]) -> TrailingSpaces:
    """
    A session for one request, with the request's overrides applied.

    Nothing outlives the request: no cached regions and no saved copies, and
    the server's own files are never read.
    """
    try:
        match_settings = get_match_settings()
        if overrides:
            merged = merge_settings(overrides, match_settings.to_mapping())
            match_settings = MatchSettings.from_mapping(merged)
        # Report a broken pattern to the caller instead of returning nothing
        build_pattern(match_settings)
    except TrailingSpacesError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return TrailingSpaces(match_settings, logger=session_logger, read_text=_no_disk_snapshot)


def _region_model(document: TextDocument, region: Region) -> RegionModel:
    return RegionModel(**region_to_json(document, region))


@app.post("/regions", response_model=RegionsResponse)
def find_regions(
    req: RegionsRequest = Body(...),
    user: UserContext = Depends(get_current_user)
):
    """
    Trailing space regions of a document.

    With a caret and highlightCurrentLine off, the caret's line is left out
    of the highlightable regions.
    """
    session = _session_for(req.settings)
    document = TextDocument(uri=req.uri, text=req.text, language_id=req.language_id)

    selection = None
    if req.caret is not None:
        selection = Position(req.caret.line, req.caret.character)

    ignored = should_ignore(document.language_id, document.scheme, session.settings)
    result = session.regions(document, selection)

    return RegionsResponse(
        offending=[_region_model(document, region) for region in result.offending],
        highlightable=[_region_model(document, region) for region in result.highlightable],
        ignored=ignored,
    )


@app.post("/trim", response_model=TrimResponse)
def trim(
    req: TrimRequest = Body(...),
    user: UserContext = Depends(get_current_user)
):
    """
    Delete the trailing spaces of a document.

    ``snapshot`` is the saved copy of the document; with ``modified_only``
    (or deleteModifiedLinesOnly) only lines changed since then are trimmed.
    """
    session = _session_for(req.settings)
    document = TextDocument(uri=req.uri, text=req.text, language_id=req.language_id)

    if req.snapshot is not None:
        session.set_snapshot(document, req.snapshot)

    try:
        result = session.delete(document, req.modified_only)
    except SnapshotError:
        raise HTTPException(status_code=422, detail=SNAPSHOT_REQUIRED)
    except TrailingSpacesError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return TrimResponse(
        text=result.text,
        deleted=result.count,
        regions=[_region_model(document, region) for region in result.regions],
        message=result.message,
    )
