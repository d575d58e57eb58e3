"""Response schemas for paged endpoints."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from .errors import PaginationProtocolError


class Paging(BaseModel):
    """``paging`` block of a page response."""
    model_config = ConfigDict(extra="ignore")

    size: StrictInt = Field(ge=0)
    last: Optional[StrictStr] = None

    @field_validator("last")
    @classmethod
    def empty_cursor_is_end(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class QueryResponse(BaseModel):
    """``POST /query`` response body."""
    model_config = ConfigDict(extra="ignore")

    items: List[Any]
    paging: Paging


class DriveListResponse(BaseModel):
    """``GET /files`` response body."""
    model_config = ConfigDict(extra="ignore")

    names: List[StrictStr]
    paging: Paging


def validate_payload(model, payload: Any):
    """Validate ``payload`` against ``model``.

    Raises:
        PaginationProtocolError: payload does not have the page shape
    """
    if not isinstance(payload, dict):
        raise PaginationProtocolError(
            f"Expected a JSON object page, got {type(payload).__name__}", payload)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise PaginationProtocolError(
            f"Malformed {model.__name__}: {e.error_count()} validation error(s)", payload) from e
