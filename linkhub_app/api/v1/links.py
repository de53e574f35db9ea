from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from linkhub_app.dependencies import get_link_service, require_user
from linkhub_app.models.link import Link
from linkhub_app.models.user import User
from linkhub_app.schemas.common import MessageResponse
from linkhub_app.schemas.link import ClickResponse, LinkCreate, LinkPositionsUpdate, LinkUpdate
from linkhub_app.services.link_service import LinkService
from linkhub_app.store.strategies import StoreError

logger = structlog.get_logger()

router = APIRouter(prefix="/links", tags=["links"])


async def get_owned_link(link_id: str, user: User, link_service: LinkService) -> Link:
    """Load a link and make sure the current user owns it"""
    link = await link_service.get_link(link_id)
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found"
        )
    if link.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only change your own links"
        )
    return link


@router.get("", response_model=List[Link])
async def list_links(
    user: User = Depends(require_user),
    link_service: LinkService = Depends(get_link_service)
):
    """All links of the current user, ordered by position"""
    return await link_service.get_links_by_user(user.id)


@router.post("", response_model=Link, status_code=status.HTTP_201_CREATED)
async def create_link(
    data: LinkCreate,
    user: User = Depends(require_user),
    link_service: LinkService = Depends(get_link_service)
):
    """Add a link at the end of the current user's list"""
    existing = await link_service.get_links_by_user(user.id)
    try:
        return await link_service.create_link(
            user.id,
            title=data.title,
            url=data.url,
            type=data.type,
            is_public=data.is_public,
            position=len(existing),
        )
    except StoreError as e:
        logger.error("create_link_failed", user_id=user.id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create link. Please try again."
        )


@router.put("/positions", response_model=MessageResponse)
async def update_positions(
    data: LinkPositionsUpdate,
    user: User = Depends(require_user),
    link_service: LinkService = Depends(get_link_service)
):
    """Persist a new order (after drag and drop)"""
    owned = {link.id for link in await link_service.get_links_by_user(user.id)}
    if any(item.id not in owned for item in data.links):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only change your own links"
        )

    if not await link_service.update_positions((item.id, item.position) for item in data.links):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update link positions. Please try again."
        )
    return MessageResponse()


@router.put("/{link_id}", response_model=Link)
async def update_link(
    link_id: str,
    data: LinkUpdate,
    user: User = Depends(require_user),
    link_service: LinkService = Depends(get_link_service)
):
    await get_owned_link(link_id, user, link_service)

    link = await link_service.update_link(link_id, data.model_dump(exclude_none=True))
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found"
        )
    return link


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    link_id: str,
    user: User = Depends(require_user),
    link_service: LinkService = Depends(get_link_service)
):
    await get_owned_link(link_id, user, link_service)

    if not await link_service.delete_link(link_id, user.id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete link. Please try again."
        )


@router.post("/{link_id}/click", response_model=ClickResponse)
async def track_click(
    link_id: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Count a click from a public profile page (no login needed)"""
    clicks = await link_service.record_click(link_id)
    if clicks is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found"
        )
    return ClickResponse(clicks=clicks)
