"""Pydantic schemas for the admin console.

This module defines the data models used by the console session and router:
- ImportRow: one parsed CSV data line
- ImportSummary: per-import tallies of succeeded / not found / failed rows
- TableRow: a file formatted for the table view
- Request bodies for the console endpoints
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from app.vector_stores.schemas import AttributeSet

IMPORT_PROCESS_NAME = "Import Process"


class ImportRow(BaseModel):
    """A CSV data line: the file to match and the attributes to write."""
    file_name: str = Field(..., description="File name as written in the CSV")
    attributes: AttributeSet = Field(..., description="Validated attribute map")


class NameTally(BaseModel):
    count: int = 0
    files: List[str] = Field(default_factory=list)


class FailedFile(BaseModel):
    name: str
    error: str


class FailureTally(BaseModel):
    count: int = 0
    files: List[FailedFile] = Field(default_factory=list)


class ImportSummary(BaseModel):
    """Outcome of one CSV import, in input row order.

    When the import aborted while parsing, ``aborted_kind`` names the error
    and ``failed`` holds a single "Import Process" entry with its message.
    """
    succeeded: NameTally = Field(default_factory=NameTally)
    not_found: NameTally = Field(default_factory=NameTally)
    failed: FailureTally = Field(default_factory=FailureTally)
    aborted_kind: Optional[str] = None

    def record_success(self, file_name: str) -> None:
        self.succeeded.files.append(file_name)
        self.succeeded.count += 1

    def record_not_found(self, file_name: str) -> None:
        self.not_found.files.append(file_name)
        self.not_found.count += 1

    def record_failure(self, file_name: str, error: str) -> None:
        self.failed.files.append(FailedFile(name=file_name, error=error))
        self.failed.count += 1

    @classmethod
    def aborted(cls, kind: str, message: str) -> "ImportSummary":
        summary = cls(aborted_kind=kind)
        summary.record_failure(IMPORT_PROCESS_NAME, message)
        return summary


class TableRow(BaseModel):
    """A file formatted for display in the console table."""
    id: str
    file_name: str
    file_id: str
    size: str
    created: str
    purpose: str
    vector_store_id: str
    attributes: str


class SelectVectorStoreRequest(BaseModel):
    vector_store_id: Optional[str] = None


class EditAttributesRequest(BaseModel):
    """Edit dialog submission: the attribute map as raw JSON text."""
    attributes: str = Field(..., description="Attributes as a JSON object literal")


class ResizeColumnRequest(BaseModel):
    """A completed pointer drag on a column's resize handle."""
    column: str
    start_x: float
    end_x: float
