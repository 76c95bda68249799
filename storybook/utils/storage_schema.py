"""
Record schemas for the in-memory store.

Each model corresponds to one keyed collection:
- User -> "users"
- Book -> "books"
- Order -> "orders"

Models serialise with camelCase keys so they can be returned from the API as-is.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoryPage(CamelModel):
    text: str = Field(..., description="Text printed on the page")
    description: str = Field(..., description="Visual description used to illustrate the page")


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class User(UserCreate):
    id: int


class BookCreate(CamelModel):
    title: str
    child_name: str
    child_age: str
    child_gender: str
    character_style: str
    hair_style: str
    skin_tone: str
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    clothing_style: Optional[str] = None
    accessories: List[str] = Field(default_factory=list)
    facial_features: List[str] = Field(default_factory=list)
    height: Optional[str] = None
    build_type: Optional[str] = None
    story_theme: str
    story_goal: str
    story_length: str
    interests: List[str] = Field(default_factory=list)
    companions: List[str] = Field(default_factory=list)
    story_content: str
    cover_image_url: Optional[str] = None
    preview_images: List[str] = Field(default_factory=list)
    all_page_images: List[str] = Field(default_factory=list)
    story_pages: List[StoryPage] = Field(default_factory=list)
    format: str = Field("pending", description="Set at checkout")
    price: str = Field("0", description="Set at checkout")
    user_id: Optional[int] = None


class Book(BookCreate):
    id: int
    created_at: datetime


class OrderCreate(CamelModel):
    book_id: int
    first_name: str
    last_name: str
    email: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    format: str
    total: str
    status: str = "pending"


class Order(OrderCreate):
    id: int
    created_at: datetime
