"""
Validation module for the odataquery package.

This module provides request checks that run before any parsing, and page
size capping.
"""

from .rules import (
    _assert_ordering_allowed,
    _cap_take,
    _cap_max_take,
)

__all__ = [
    "_assert_ordering_allowed",
    "_cap_take",
    "_cap_max_take",
]
