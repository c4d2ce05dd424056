"""Schema of the persisted config.json document."""
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StorageRecord(BaseModel):
    """One entry of the ``storages`` list as it is stored on disk."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    name: str = Field(..., min_length=1)
    type: Literal["minio", "redis"]
    username: Optional[str] = None
    password: Optional[str] = None
    image_name: Optional[str] = Field(None, alias="imageName")
    image_version: Optional[str] = Field(None, alias="imageVersion")
    volume: Optional[str] = None


class ConfigDocumentModel(BaseModel):
    """Whole plugin configuration: default storage name plus all storages."""

    model_config = ConfigDict(extra='ignore')

    default: Optional[str] = None
    storages: List[StorageRecord] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def migrate_items_key(cls, data: Any) -> Any:
        """Older plugin revisions stored the list under ``items``."""
        if isinstance(data, dict) and "storages" not in data and "items" in data:
            data = dict(data)
            data["storages"] = data.pop("items")
        return data

    @field_validator('storages')
    @classmethod
    def validate_unique_names(cls, v):
        """Reject documents where two storages share a name."""
        seen = set()
        for record in v:
            if record.name in seen:
                raise ValueError(f"Duplicate storage name '{record.name}'")
            seen.add(record.name)
        return v
