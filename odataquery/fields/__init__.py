"""
Field accessors for record classes.

This module provides typed field references and the type inspection used to
validate member paths in filters, orderings and includes.
"""

from .accessors import (
    FieldRef,
    Cast,
    Fields,
    fields_of,
    field_path,
    field_name,
    entity_fields,
    element_type,
    unwrap_optional,
    resolve_member,
    resolve_path,
    read_member,
    type_name,
)

__all__ = [
    "FieldRef",
    "Cast",
    "Fields",
    "fields_of",
    "field_path",
    "field_name",
    "entity_fields",
    "element_type",
    "unwrap_optional",
    "resolve_member",
    "resolve_path",
    "read_member",
    "type_name",
]
