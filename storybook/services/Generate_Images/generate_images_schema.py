from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ImageOptions(BaseModel):
    style: Optional[str] = Field(None, description="Art style keyword, e.g. cartoon, watercolor, 3d")
    character_description: Optional[str] = None
    reference_image: Optional[str] = Field(
        None, description="Image reference whose character rendering should be kept"
    )


class ImageStage(str, Enum):
    PRIMARY = "primary"
    SIMPLIFIED = "simplified"
    FALLBACK = "fallback"


class ImageAttempt(BaseModel):
    """Outcome of one live provider call"""
    stage: ImageStage
    image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.image_url)


class ImageResult(BaseModel):
    image_url: str
    stage: ImageStage
