from typing import List

from fastapi import APIRouter, HTTPException, status

from linkhub_app.services.themes import THEMES, Theme, list_themes

router = APIRouter(prefix="/themes", tags=["themes"])


@router.get("", response_model=List[Theme])
async def get_themes():
    return list_themes()


@router.get("/{theme_id}", response_model=Theme)
async def get_theme_by_id(theme_id: str):
    theme = THEMES.get(theme_id)
    if not theme:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Theme not found"
        )
    return theme
