from typing import List, Optional

from pydantic import ConfigDict, Field

from linkhub_app.models.link import LinkType
from linkhub_app.schemas.common import CamelModel


class LinkBase(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, description="Button label")
    url: str = Field(..., min_length=1, description="Destination URL")
    type: LinkType = Field(LinkType.WEBSITE, description="Link kind")
    is_public: bool = Field(True, description="Shown on the public profile")


class LinkCreate(LinkBase):
    pass


class LinkUpdate(CamelModel):
    """Partial edit, omitted fields keep their current value"""
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1)
    url: Optional[str] = Field(None, min_length=1)
    type: Optional[LinkType] = None
    is_public: Optional[bool] = None


class LinkPosition(CamelModel):
    id: str
    position: int = Field(..., ge=0)


class LinkPositionsUpdate(CamelModel):
    """New order after a drag and drop, applied in list order"""
    links: List[LinkPosition]


class ClickResponse(CamelModel):
    success: bool = True
    clicks: Optional[int] = None
