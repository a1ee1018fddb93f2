"""Webhooks from the console. Authenticated by an HMAC-SHA256 signature of the raw body."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import HTTPException

from scopegate.api.v1.dependencies import get_cache_purge_service
from scopegate.application.services import CachePurgeService
from scopegate.core.config import get_settings
from scopegate.core.limiter import limit_webhooks
from scopegate.infrastructure.security import verify_signature
from scopegate.schemas.webhook import CachePurgeRequest, CachePurgeResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def verify_webhook_signature(request: Request) -> None:
    """403 unless the signature header matches the body under SERVICE_SECRET.

    An unset secret rejects every call.
    """
    settings = get_settings()
    secret = settings.service_secret.get_secret_value() if settings.service_secret else None
    body = await request.body()
    header = request.headers.get(settings.webhook_signature_header)
    if not verify_signature(body, header, secret):
        logger.warning("Rejected webhook with invalid signature from %s", request.client)
        raise HTTPException(status_code=403, detail="Invalid signature")


@router.post(
    "/cache-purge",
    response_model=CachePurgeResponse,
    dependencies=[Depends(verify_webhook_signature)],
)
@limit_webhooks
async def purge_cache(
    request: Request,
    body: CachePurgeRequest,
    purge_svc: Annotated[CachePurgeService, Depends(get_cache_purge_service)],
):
    """Drop cached access for (user, organization) and the cached signing keys."""
    await purge_svc.purge(body.organization_id, body.user_id)
    return CachePurgeResponse(organization_id=body.organization_id, user_id=body.user_id)
