"""Signup / signin request bodies."""

from typing import Annotated

from pydantic import BaseModel, StringConstraints, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=5, max_length=255)]
Password = Annotated[str, StringConstraints(min_length=6)]


class AuthPayload(BaseModel):
    email: Email
    password: Password

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        try:
            validate_email(value)
        except PydanticCustomError:
            raise PydanticCustomError("value_error", "Invalid email format")
        return value
