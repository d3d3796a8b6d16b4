"""Pydantic models for the JSON shapes exchanged with capture and storage collaborators.

Node payloads are validated one level at a time: ``children`` stays a list of
raw mappings so the arena builder can walk deep documents with an explicit
stack instead of relying on recursive model validation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodePayload(BaseModel):
    """A single serialized DOM node (children left unvalidated)."""
    model_config = ConfigDict(populate_by_name=True)

    tag_name: str = Field(alias="tagName", min_length=1)
    id: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="className")
    attributes: Dict[str, str] = Field(default_factory=dict)
    text_content: Optional[str] = Field(default=None, alias="textContent")
    children: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("attributes", mode="before")
    @classmethod
    def stringify_attributes(cls, value):
        """Capture scripts occasionally emit numbers or booleans as attribute values."""
        if isinstance(value, dict):
            return {str(key): "" if item is None else str(item) for key, item in value.items()}
        return value


class SnapshotPayload(BaseModel):
    """A serialized point-in-time document snapshot."""
    model_config = ConfigDict(populate_by_name=True)

    url: str
    title: Optional[str] = None
    timestamp: int
    root_node: Dict[str, Any] = Field(alias="rootNode")
