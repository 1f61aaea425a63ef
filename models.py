from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, Mapping, Optional

# --- Shortcode Attributes ---


class FrameAttributes(BaseModel):
    src: str = ""
    width: str = "100%"
    height: str = "450"
    class_: str = Field("safe-iframe", alias="class")
    title: str = ""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> "FrameAttributes":
        """Merges a caller attribute bag over the defaults, ignoring unknown keys."""
        known = {"src", "width", "height", "class", "title"}
        values: Dict[str, str] = {}
        for key, value in (raw or {}).items():
            name = str(key).lower()
            if name in known and value is not None:
                values[name] = str(value)
        return cls.model_validate(values)


# --- API Models ---


class RenderContentRequest(BaseModel):
    content: str


class RenderContentResponse(BaseModel):
    html: str
