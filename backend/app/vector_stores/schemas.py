"""Pydantic schemas for vector store files.

This module defines the data models exchanged with the vector store service:
- StoredFile: a file object as the file storage API reports it
- VectorStoreFile: a file's membership in a vector store, with attributes
- FileRecord: the merged view the console lists and edits
- Request/response bodies for the /api/vector_stores endpoints

Attribute maps are capped by the service at 16 keys, each key at most
256 characters. validate_attributes() enforces this before any remote write.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import AttributeConstraintError

MAX_ATTRIBUTE_KEYS = 16
MAX_ATTRIBUTE_KEY_LENGTH = 256

AttributeSet = Dict[str, Any]


def validate_attributes(attributes: AttributeSet) -> None:
    """Check an attribute map against the service limits.

    Args:
        attributes: Attribute map about to be written.

    Raises:
        AttributeConstraintError: If there are more than 16 keys or any key
            is longer than 256 characters.
    """
    if len(attributes) > MAX_ATTRIBUTE_KEYS:
        raise AttributeConstraintError(
            f"Attributes cannot have more than {MAX_ATTRIBUTE_KEYS} keys"
        )
    for key in attributes:
        if len(key) > MAX_ATTRIBUTE_KEY_LENGTH:
            raise AttributeConstraintError(
                f"Attribute keys cannot be longer than {MAX_ATTRIBUTE_KEY_LENGTH} characters"
            )


class StoredFile(BaseModel):
    """File object as reported by the file storage API."""
    id: str
    filename: str = ""
    bytes: Optional[int] = None
    created_at: Optional[int] = None
    purpose: Optional[str] = None
    object: str = "file"


class VectorStoreFile(BaseModel):
    """A file attached to a vector store."""
    id: str
    attributes: AttributeSet = Field(default_factory=dict)


class FileRecord(BaseModel):
    """A vector store file merged with its stored-file details.

    ``name`` and ``filename`` carry the same value; CSV imports match
    against either.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="File ID")
    name: str = Field("", description="Display name")
    filename: str = Field("", description="Stored filename")
    attributes: AttributeSet = Field(default_factory=dict, description="Attribute map")
    vector_store_id: str = Field(..., alias="vectorStoreId", description="Owning vector store")
    object: str = Field("file", description="Object type")
    bytes: Optional[int] = Field(None, description="File size in bytes")
    created_at: Optional[int] = Field(None, description="Creation time (epoch seconds)")
    purpose: Optional[str] = Field(None, description="File purpose")

    @property
    def display_name(self) -> str:
        return self.filename or self.name


class UpdateAttributesRequest(BaseModel):
    """Body of PATCH /api/vector_stores/files/{file_id}."""
    model_config = ConfigDict(populate_by_name=True)

    attributes: AttributeSet
    vector_store_id: Optional[str] = Field(None, alias="vectorStoreId")


class FileObjectPayload(BaseModel):
    name: Optional[str] = None
    content: str = Field(..., description="Base64-encoded file content")
    metadata: Optional[AttributeSet] = None


class UploadFileRequest(BaseModel):
    """Body of POST /api/vector_stores/upload_file."""
    model_config = ConfigDict(populate_by_name=True)

    file_object: FileObjectPayload = Field(..., alias="fileObject")
    vector_store_id: Optional[str] = Field(None, alias="vectorStoreId")


class UploadFileResponse(BaseModel):
    id: str
    file_id: str
    name: str
    status: str = "success"
