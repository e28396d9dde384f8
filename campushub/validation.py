"""
Request body validation on top of pydantic.
"""

from typing import Any, Collection, Dict, Optional, Type, TypeVar

import pydantic

from campushub.errors import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def parse_payload(
    model: Type[ModelT],
    data: Optional[Dict[str, Any]],
    missing_msg: Optional[str] = None,
    missing_types: Collection[str] = ("missing",),
) -> ModelT:
    """
    Validate a JSON body against a schema.

    Args:
        model: The pydantic model to validate against.
        data: Parsed JSON body (None counts as empty).
        missing_msg (str, optional): Top-level message used when any issue
            has one of `missing_types`; "Invalid input" otherwise.
        missing_types: pydantic error types that mean "field not supplied".

    Raises:
        ValidationError: With one "field: message" entry per problem.
    """
    try:
        return model.model_validate(data or {})
    except pydantic.ValidationError as e:
        messages = []
        missing = False
        for issue in e.errors():
            field = ".".join(str(part) for part in issue["loc"]) or "body"
            messages.append(f"{field}: {issue['msg']}")
            missing = missing or issue["type"] in missing_types
        raise ValidationError(messages, missing_msg if missing else None)
