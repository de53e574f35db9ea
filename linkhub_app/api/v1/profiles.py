from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from linkhub_app.config import settings
from linkhub_app.dependencies import get_link_service, get_profile_service, require_user
from linkhub_app.models.link import Link
from linkhub_app.models.profile import Profile, ProfileAnalytics
from linkhub_app.models.user import User
from linkhub_app.schemas.profile import ImageUploadResponse, ProfileUpdate, PublicProfileResponse
from linkhub_app.services.link_service import LinkService
from linkhub_app.services.profile_service import ProfileService
from linkhub_app.services.themes import get_theme

router = APIRouter(tags=["profiles"])


def profile_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Profile not found"
    )


@router.get("/profiles/{username}", response_model=PublicProfileResponse)
async def get_public_profile(
    username: str,
    track: bool = Query(True, description="Count this request as a profile view"),
    profile_service: ProfileService = Depends(get_profile_service),
    link_service: LinkService = Depends(get_link_service)
):
    """
    Data for the public profile page: profile, resolved theme and public links.
    Each call counts as a view unless track=false.
    """
    profile = await profile_service.get_profile(username)
    if not profile:
        raise profile_not_found()

    links = await link_service.get_public_links_by_username(username)
    if track:
        await profile_service.record_view(username)

    return PublicProfileResponse(profile=profile, theme=get_theme(profile.theme), links=links)


@router.get("/profiles/{username}/links", response_model=List[Link])
async def get_public_links(
    username: str,
    link_service: LinkService = Depends(get_link_service)
):
    return await link_service.get_public_links_by_username(username)


@router.get("/profile", response_model=Profile)
async def get_own_profile(
    user: User = Depends(require_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    profile = await profile_service.get_profile(user.username)
    if not profile:
        raise profile_not_found()
    return profile


@router.put("/profile", response_model=Profile)
async def update_own_profile(
    data: ProfileUpdate,
    user: User = Depends(require_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Update the current user's profile (customization is merged, not replaced)"""
    profile = await profile_service.update_profile(user.username, data.model_dump(exclude_unset=True))
    if not profile:
        raise profile_not_found()
    return profile


@router.post("/profile/image", response_model=ImageUploadResponse)
async def upload_profile_image(
    image: UploadFile = File(...),
    user: User = Depends(require_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    content_type = (image.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only image uploads are allowed"
        )

    data = await image.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image provided"
        )
    if len(data) > settings.max_image_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Image is too large"
        )

    image_url = await profile_service.upload_profile_image(user.username, data, content_type)
    if not image_url:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload image"
        )
    return ImageUploadResponse(image_url=image_url)


@router.get("/profile/analytics", response_model=ProfileAnalytics)
async def get_analytics(
    days: int = Query(settings.analytics_default_days, ge=1, le=365),
    user: User = Depends(require_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Total views and views per day for the current user"""
    return await profile_service.get_analytics(user.username, days)
