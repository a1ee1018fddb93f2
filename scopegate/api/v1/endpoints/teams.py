"""Teams API: teams of the context organization (current operating mode only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from scopegate.api.v1.dependencies import (
    get_team_repo,
    get_team_repo_for_write,
    require_any_permission,
    require_organization,
    require_permission,
)
from scopegate.core.limiter import limit_writes
from scopegate.core.request_context import RequestContext
from scopegate.infrastructure.persistence.repositories import TeamRepository
from scopegate.schemas.team import TeamCreateRequest, TeamResponse

router = APIRouter()


@router.get("", response_model=list[TeamResponse])
async def list_teams(
    context: Annotated[RequestContext, Depends(require_organization)],
    team_repo: Annotated[TeamRepository, Depends(get_team_repo)],
    _: Annotated[object, Depends(require_any_permission("teams.view", "teams.manage"))] = None,
):
    teams = await team_repo.list_in_context(context)
    return [TeamResponse.model_validate(t) for t in teams]


@router.post("", response_model=TeamResponse, status_code=201)
@limit_writes
async def create_team(
    request: Request,
    body: TeamCreateRequest,
    context: Annotated[RequestContext, Depends(require_organization)],
    team_repo: Annotated[TeamRepository, Depends(get_team_repo_for_write)],
    _: Annotated[object, Depends(require_permission("teams.manage"))] = None,
):
    """Create a team in the context organization (organization_id is filled on insert)."""
    created = await team_repo.create_team(body.name)
    return TeamResponse.model_validate(created)
