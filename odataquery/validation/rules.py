import logging
from typing import Any, Optional

from ..config import GLOBAL_MAX_TAKE
from ..errors import OrderingRequiredError
from ..filters.models import FilterRequest

log = logging.getLogger("odataquery.validation")


def _assert_ordering_allowed(request: FilterRequest, default_order: Optional[Any] = None) -> None:
    """Paging needs a stable order; thenBy only refines an explicit $orderBy."""
    has_order = bool(request.order_by and request.order_by.strip())
    if (request.skip is not None or request.take is not None) and not has_order and default_order is None:
        raise OrderingRequiredError("You must provide $orderBy if using $skip or $top")
    if request.then_by and request.then_by.strip() and not has_order:
        raise OrderingRequiredError("You must provide $orderBy if using thenBy")


def _cap_take(take: Optional[int], max_take: Optional[int]) -> Optional[int]:
    if max_take is None:
        return take
    if take is None:
        return max_take
    if take > max_take:
        log.warning("Requested $top=%s exceeds the limit of %s", take, max_take)
        return max_take
    return take


def _cap_max_take(max_take: Optional[int]) -> int:
    if max_take is None or max_take <= 0:
        return GLOBAL_MAX_TAKE
    return min(int(max_take), GLOBAL_MAX_TAKE)
