"""
Query compilation for the odataquery package.

This module provides the filter rewriting stages, the predicate compiler and
expression trees, ordering and include compilation, and the query service that
hands compiled queries to a read-only repository.
"""

from .lexer import tokenize
from .rewrite import (
    normalize_strings,
    convert_datetimes,
    rewrite_functions,
    rewrite,
)
from .expressions import (
    Expression,
    Parameter,
    Constant,
    Member,
    Comparison,
    Logical,
    Contains,
    Quantifier,
    Lambda,
    Predicate,
    ExpressionVisitor,
    ExpressionTransformer,
    ParameterReplacer,
    and_also,
)
from .compiler import compile_filter, parse_predicate
from .ordering import SortKey, Ordering, parse_ordering, compile_ordering
from .includes import IncludePath, include_path, expand_includes
from .models import BaseQuery, CompiledQuery, ReadOnlyRepository
from .base import BaseQueryBuilder
from .service import ODataQueryService
from .memory import InMemoryRepository

__all__ = [
    "tokenize",
    "normalize_strings",
    "convert_datetimes",
    "rewrite_functions",
    "rewrite",
    "Expression",
    "Parameter",
    "Constant",
    "Member",
    "Comparison",
    "Logical",
    "Contains",
    "Quantifier",
    "Lambda",
    "Predicate",
    "ExpressionVisitor",
    "ExpressionTransformer",
    "ParameterReplacer",
    "and_also",
    "compile_filter",
    "parse_predicate",
    "SortKey",
    "Ordering",
    "parse_ordering",
    "compile_ordering",
    "IncludePath",
    "include_path",
    "expand_includes",
    "BaseQuery",
    "CompiledQuery",
    "ReadOnlyRepository",
    "BaseQueryBuilder",
    "ODataQueryService",
    "InMemoryRepository",
]
