"""
Event request body.

Required fields must be non-empty after trimming but are stored exactly as
submitted. Media links are checked for an http(s) URL shape, also without
rewriting them.
"""

import datetime
from typing import Annotated, Any, Dict, Optional

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

Text = Annotated[str, StringConstraints(max_length=255)]
ShortText = Annotated[str, StringConstraints(max_length=50)]

# Error type for a required field that is present but blank
BLANK = "blank"

_http_url = TypeAdapter(AnyHttpUrl)


class EventFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Text
    description: Optional[str] = None
    date: datetime.date
    time: ShortText
    location: Text
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    video_url: Optional[str] = Field(default=None, alias="videoUrl")

    @field_validator("title", "time", "location")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise PydanticCustomError(BLANK, "must not be blank")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("image_url", "video_url", mode="before")
    @classmethod
    def check_url_shape(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, str):
            raise PydanticCustomError("url_type", "must be a URL string")
        if not value.strip():
            return None
        try:
            _http_url.validate_python(value.strip())
        except PydanticValidationError:
            raise PydanticCustomError("url_parsing", "must be a valid http(s) URL")
        return value

    def to_record(self) -> Dict[str, Any]:
        """Column-named dict for the store."""
        return self.model_dump(by_alias=False)
