from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BulkUploadRequest(BaseModel):
    """Parsed spreadsheet rows keyed by column header."""

    rows: List[Dict[str, Any]] = Field(..., min_length=1)


class BulkUploadStats(BaseModel):
    total: int
    inserted: int
    duplicates: int
    errors: int
    unassigned: int


class BulkRowError(BaseModel):
    row: int
    message: str


class BulkUploadResponse(BaseModel):
    success: bool
    message: str
    stats: BulkUploadStats
    errors: List[BulkRowError] = Field(default_factory=list)
