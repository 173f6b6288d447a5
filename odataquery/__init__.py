"""
odataquery: a restricted OData-style query layer over typed record classes.

Build filter requests from typed field references, compile them back into
callable predicates, orderings and include paths, and run them against a
read-only repository.
"""

from .errors import (
    ODataError,
    ValidationError,
    OrderingRequiredError,
    TranslationError,
    FilterParseError,
    InvalidPropertyError,
    UnsupportedFieldExpression,
)
from .fields import FieldRef, Fields, fields_of
from .filters import FilterBuilder, FilterRequest, Operation
from .query import (
    BaseQuery,
    BaseQueryBuilder,
    CompiledQuery,
    InMemoryRepository,
    ODataQueryService,
    ReadOnlyRepository,
    and_also,
    compile_filter,
    compile_ordering,
    expand_includes,
)
from .links import Link, LinkNames, ResponseBuilder

__version__ = "1.0.0"

__all__ = [
    "ODataError",
    "ValidationError",
    "OrderingRequiredError",
    "TranslationError",
    "FilterParseError",
    "InvalidPropertyError",
    "UnsupportedFieldExpression",
    "FieldRef",
    "Fields",
    "fields_of",
    "FilterBuilder",
    "FilterRequest",
    "Operation",
    "BaseQuery",
    "BaseQueryBuilder",
    "CompiledQuery",
    "InMemoryRepository",
    "ODataQueryService",
    "ReadOnlyRepository",
    "and_also",
    "compile_filter",
    "compile_ordering",
    "expand_includes",
    "Link",
    "LinkNames",
    "ResponseBuilder",
]
