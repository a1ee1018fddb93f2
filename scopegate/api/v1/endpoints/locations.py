"""Locations API: sites of the context branch, or of every branch when none is selected."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from scopegate.api.v1.dependencies import (
    get_location_repo,
    get_location_repo_for_write,
    require_branch,
    require_organization,
    require_permission,
)
from scopegate.core.limiter import limit_writes
from scopegate.core.request_context import RequestContext
from scopegate.infrastructure.persistence.repositories import LocationRepository
from scopegate.schemas.team import LocationCreateRequest, LocationResponse

router = APIRouter()


@router.get("", response_model=list[LocationResponse])
async def list_locations(
    context: Annotated[RequestContext, Depends(require_organization)],
    location_repo: Annotated[LocationRepository, Depends(get_location_repo)],
):
    locations = await location_repo.list_in_context(context)
    return [LocationResponse.model_validate(loc) for loc in locations]


@router.post("", response_model=LocationResponse, status_code=201)
@limit_writes
async def create_location(
    request: Request,
    body: LocationCreateRequest,
    context: Annotated[RequestContext, Depends(require_branch)],
    location_repo: Annotated[LocationRepository, Depends(get_location_repo_for_write)],
    _: Annotated[object, Depends(require_permission("locations.manage"))] = None,
):
    """Create a location in the context branch (organization and branch filled on insert)."""
    created = await location_repo.create_location(body.name, body.code, body.address)
    return LocationResponse.model_validate(created)
