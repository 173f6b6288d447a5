from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qsl, quote
import json

from jsonschema import Draft7Validator
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import FilterParseError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Operation(str, Enum):
    EQUALS = "eq"
    NOT_EQUAL_TO = "ne"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    GREATER_THAN_OR_EQUAL_TO = "ge"
    LESS_THAN_OR_EQUAL_TO = "le"
    CONTAINS = "contains"

    @property
    def token(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, token: str) -> "Operation":
        try:
            return cls(token.lower())
        except ValueError:
            raise FilterParseError(f"Unknown operator '{token}'", token=token) from None


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------

# Emission order for query strings.
QUERY_KEYS = ("$filter", "$expand", "$orderBy", "thenBy", "$skip", "$top", "$count", "$links")

# Accepted spellings when parsing, lower-cased -> field alias.
_QUERY_ALIASES = {k.lower(): k for k in QUERY_KEYS}
_QUERY_ALIASES["$thenby"] = "thenBy"


# Left readable in query strings; "%", "&", "+" and "#" are always escaped.
_QUERY_SAFE = " $'(),:/=<>!*\""


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return quote(str(value), safe=_QUERY_SAFE)


class FilterRequest(BaseModel):
    """
    OData-style request received at the boundary. Immutable once built;
    every field is independently optional.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    take: Optional[int] = Field(default=None, alias="$top", ge=0)
    skip: Optional[int] = Field(default=None, alias="$skip", ge=0)
    count: Optional[bool] = Field(default=None, alias="$count")
    filter: Optional[str] = Field(default=None, alias="$filter")
    order_by: Optional[str] = Field(default=None, alias="$orderBy")
    then_by: Optional[str] = Field(default=None, alias="thenBy")
    expand: Optional[str] = Field(default=None, alias="$expand")
    links: Optional[bool] = Field(default=None, alias="$links")

    @field_validator("count", "links", mode="before")
    @classmethod
    def _lower_bools(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    # query-string helpers
    def to_query_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        return {k: data[k] for k in QUERY_KEYS if k in data}

    def to_query_string(self) -> str:
        params = [f"{k}={_render_value(v)}" for k, v in self.to_query_dict().items()]
        return "?" + "&".join(params)

    @classmethod
    def from_query_string(cls, query: str) -> "FilterRequest":
        """
        Parse '?$filter=...&$top=...' in any key order. Values are
        percent-decoded; unknown keys are ignored.
        """
        query = query.split("?", 1)[1] if "?" in query else query
        data: Dict[str, str] = {}
        for key, value in parse_qsl(query, keep_blank_values=False):
            alias = _QUERY_ALIASES.get(key.lower())
            if alias:
                data[alias] = value
        return cls.model_validate(data)


# ---------------------------------------------------------------------------
# JSON Schema
# ---------------------------------------------------------------------------

FILTER_REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "$id": "https://example.com/filter-request.schema.json",
    "title": "OData Filter Request",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "$filter": {"type": ["string", "null"]},
        "$orderBy": {"type": ["string", "null"], "minLength": 1},
        "thenBy": {"type": ["string", "null"], "minLength": 1},
        "$expand": {"type": ["string", "null"]},
        "$skip": {"type": ["integer", "null"], "minimum": 0},
        "$top": {"type": ["integer", "null"], "minimum": 0},
        "$count": {"type": ["boolean", "null"]},
        "$links": {"type": ["boolean", "null"]},
    },
}

_REQUEST_VALIDATOR = Draft7Validator(FILTER_REQUEST_SCHEMA)


def parse_filter_request_json(
    payload: Union[str, Dict[str, Any]],
    *,
    validate: bool = True,
) -> FilterRequest:
    """
    Accept a JSON string or dict keyed by the query aliases and return a
    FilterRequest. Schema violations raise jsonschema.ValidationError.
    """
    data = json.loads(payload) if isinstance(payload, str) else payload
    if validate:
        _REQUEST_VALIDATOR.validate(data)
    return FilterRequest.model_validate(data)


__all__ = [
    "Operation",
    "FilterRequest",
    "QUERY_KEYS",
    "FILTER_REQUEST_SCHEMA",
    "parse_filter_request_json",
]
