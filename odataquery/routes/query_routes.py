# odataquery/routes/query_routes.py
from typing import Any, Dict, Optional
from urllib.parse import unquote

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..errors import ODataError
from ..filters import FilterRequest
from ..links import ResponseBuilder

router = APIRouter(prefix="/odata", tags=["odata"])


def filter_request_params(
    filter: Optional[str] = Query(None, alias="$filter"),
    order_by: Optional[str] = Query(None, alias="$orderBy"),
    then_by: Optional[str] = Query(None, alias="thenBy"),
    expand: Optional[str] = Query(None, alias="$expand"),
    skip: Optional[int] = Query(None, alias="$skip", ge=0),
    take: Optional[int] = Query(None, alias="$top", ge=0),
    count: Optional[bool] = Query(None, alias="$count"),
    links: Optional[bool] = Query(None, alias="$links"),
) -> FilterRequest:
    return FilterRequest(
        filter=filter,
        order_by=order_by,
        then_by=then_by,
        expand=expand,
        skip=skip,
        take=take,
        count=count,
        links=links,
    )


def _error_detail(e: ODataError) -> Dict[str, Any]:
    return {"message": e.message, **e.details}


@router.get("")
def list_entities(request: Request):
    registry = request.app.state.registry
    return {"entities": [registry.describe(name) for name in registry.names()]}


@router.get("/{entity}")
async def read_entities(
    entity: str,
    request: Request,
    params: FilterRequest = Depends(filter_request_params),
):
    registry = request.app.state.registry
    service = request.app.state.query_service
    try:
        base = registry.ensure_entity(entity)
        rows = await service.get_entities(params, base.entity_type, base)

        response = ResponseBuilder().with_data(rows)
        if params.count or params.links:
            total = await service.get_total_count(params, base.entity_type, base)
            if params.count:
                response.with_count(len(rows), total)
            if params.links:
                url = unquote(str(request.url))
                response.with_link_to_self(url, request.method)
                response.with_links_for_pagination(url, request.method, params.skip, params.take, total)
        return response.build()
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0] if e.args else str(e))
    except ODataError as e:
        raise HTTPException(status_code=400, detail=_error_detail(e))
