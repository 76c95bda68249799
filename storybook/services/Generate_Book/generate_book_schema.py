from typing import List, Literal, Optional

from pydantic import Field

from storybook.utils.storage_schema import CamelModel


class BookGenerationRequest(CamelModel):
    # Child information
    child_name: str = Field(..., min_length=1, description="Child's name")
    child_age: str = Field(..., min_length=1, description="Age range, e.g. '3-5'")
    child_gender: Literal["boy", "girl", "neutral"] = Field(..., description="'neutral' is written as 'child'")
    interests: List[str] = Field(..., min_length=1, max_length=3, description="One to three interests")
    # Character appearance
    character_style: str = Field(..., min_length=1, description="Art style, e.g. cartoon, watercolor, 3d")
    hair_style: str = Field(..., min_length=1)
    skin_tone: str = Field(..., min_length=1)
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    clothing_style: Optional[str] = None
    accessories: List[str] = Field(default_factory=list, max_length=3)
    facial_features: List[str] = Field(default_factory=list, max_length=3)
    height: Optional[str] = None
    build_type: Optional[str] = None
    # Story settings
    story_theme: str = Field(..., min_length=1)
    story_goal: str = Field(..., min_length=1)
    companions: List[str] = Field(default_factory=list, max_length=2, description="Up to two companions")
    story_length: str = Field(..., min_length=1, description="'1' short, '2' medium, '3' long")


class IllustratedPage(CamelModel):
    text: str
    description: str
    image_url: str


class GenerateBookResponse(CamelModel):
    book_id: int
    title: str
    content: str
    cover_image_url: str
    preview_images: List[str]
    pages: List[IllustratedPage] = Field(
        default_factory=list,
        description="Story pages in reading order, each paired with its illustration",
    )
