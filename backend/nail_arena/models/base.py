from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, TypeVar

from pydantic import BaseModel, ConfigDict

DocumentT = TypeVar("DocumentT", bound="Document")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """Base for records persisted in a collection keyed by ``id``."""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_mongo(cls: type[DocumentT], document: Dict[str, Any]) -> DocumentT:
        """Convert a MongoDB document to a model."""

        payload = dict(document)
        payload["id"] = payload.pop("_id", payload.get("id"))
        return cls(**payload)

    def to_mongo(self) -> Dict[str, Any]:
        document = self.model_dump()
        document["_id"] = document.pop("id")
        return document
