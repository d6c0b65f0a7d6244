from typing import List, Dict, Optional, Any
from pydantic import BaseModel

# ---- Documents ----

class CaretPosition(BaseModel):
    """Caret (selection end), 0-based; clamped into the document."""
    line: int
    character: int = 0

class DocumentRequest(BaseModel):
    text: str
    uri: str = "untitled:Untitled-1"
    language_id: str = "plaintext"
    settings: Dict[str, Any] = {}  # Overrides, keyed by option name (e.g. "regexp")

class RegionModel(BaseModel):
    start: int
    end: int
    start_line: int
    start_col: int
    end_line: int
    end_col: int

# ---- Highlighting ----

class RegionsRequest(DocumentRequest):
    caret: Optional[CaretPosition] = None

class RegionsResponse(BaseModel):
    offending: List[RegionModel] = []
    highlightable: List[RegionModel] = []
    ignored: bool = False

# ---- Trimming ----

class TrimRequest(DocumentRequest):
    snapshot: Optional[str] = None  # Saved copy, for modified-lines-only trimming
    modified_only: bool = False

class TrimResponse(BaseModel):
    text: str
    deleted: int
    regions: List[RegionModel] = []
    message: Optional[str] = None
