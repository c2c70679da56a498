"""
Input validation utilities for the Deliveries service.

Request bodies are parsed into typed commands before they reach the state
machine. A body that does not parse is a BadRequest with the same message the
other services already expect, not FastAPI's default 422.
"""
from typing import Any, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from domain.errors import BadRequestError

M = TypeVar("M", bound=BaseModel)


def parse_body(model: Type[M], payload: Any) -> M:
    """
    Validate a decoded JSON body against a pydantic model.

    Raises:
        BadRequestError(400) listing the offending fields
    """
    if not isinstance(payload, dict):
        raise BadRequestError(details={"errors": ["body must be a JSON object"]})
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise BadRequestError(details={"fields": fields})


async def read_json(request: Request) -> Any:
    """Decode the request body; malformed JSON is a BadRequest."""
    try:
        return await request.json()
    except ValueError:
        raise BadRequestError(details={"errors": ["body is not valid JSON"]})
