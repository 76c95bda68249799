from typing import Optional

from pydantic import EmailStr, Field

from storybook.utils.storage_schema import CamelModel


class CheckoutRequest(CamelModel):
    book_id: Optional[int] = Field(None, description="Book produced by /books/generate")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    format: str = Field(..., min_length=1, description="hardcover or digital")
    total: str = Field(..., min_length=1, description="Displayed price, e.g. '$29.99'")
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
