"""
Five-step book creation wizard driven against the Storybook HTTP API.

Steps: child info -> character -> story settings -> preview -> checkout.
Each step validates only its own fields before the wizard moves on; leaving the
story settings step generates the book.
"""
import logging
from enum import IntEnum
from typing import List, Literal, Optional

import requests
from pydantic import Field, ValidationError
from pydantic.alias_generators import to_camel

from storybook.services.Create_Order.create_order_schema import CheckoutRequest
from storybook.utils.storage_schema import CamelModel

logger = logging.getLogger(__name__)

FORMAT_PRICES = {
    "hardcover": "$29.99",
    "digital": "$14.99",
}

SHIPPING_FIELDS = ("address", "city", "state", "zip")


class WizardStep(IntEnum):
    CHILD_INFO = 1
    CHARACTER = 2
    STORY_SETTINGS = 3
    PREVIEW = 4
    CHECKOUT = 5


class ChildInfoStep(CamelModel):
    child_name: str = Field(..., min_length=1)
    child_age: str = Field(..., min_length=1)
    child_gender: Literal["boy", "girl", "neutral"]
    interests: List[str] = Field(..., min_length=1, max_length=3)


class CharacterStep(CamelModel):
    character_style: str = Field(..., min_length=1)
    hair_style: str = Field(..., min_length=1)
    skin_tone: str = Field(..., min_length=1)
    accessories: List[str] = Field(default_factory=list, max_length=3)
    facial_features: List[str] = Field(default_factory=list, max_length=3)


class StorySettingsStep(CamelModel):
    story_theme: str = Field(..., min_length=1)
    story_goal: str = Field(..., min_length=1)
    companions: List[str] = Field(default_factory=list, max_length=2)
    story_length: str = Field(..., min_length=1)


STEP_SCHEMAS = {
    WizardStep.CHILD_INFO: ChildInfoStep,
    WizardStep.CHARACTER: CharacterStep,
    WizardStep.STORY_SETTINGS: StorySettingsStep,
}


class WizardError(Exception):
    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def first_error_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid value")


class BookWizard:
    def __init__(self, base_url: str = "http://localhost:8000", session: Optional[requests.Session] = None, timeout: float = 600.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.step = WizardStep.CHILD_INFO
        self.book_data = {
            "interests": [],
            "accessories": [],
            "facialFeatures": [],
            "companions": [],
            "storyLength": "2",
        }
        self.generated_book: Optional[dict] = None
        self.order: Optional[dict] = None

    def update(self, **fields) -> dict:
        """Merge fields (snake_case or camelCase) into the accumulated request"""
        for name, value in fields.items():
            key = name if name in self.book_data or "_" not in name else to_camel(name)
            self.book_data[key] = value
        return self.book_data

    def validate_step(self, step: Optional[WizardStep] = None) -> None:
        schema = STEP_SCHEMAS.get(step or self.step)
        if schema is None:
            return
        try:
            schema.model_validate(self.book_data)
        except ValidationError as e:
            raise WizardError(first_error_message(e)) from e

    def next_step(self) -> WizardStep:
        if self.step == WizardStep.CHECKOUT:
            return self.step
        self.validate_step()
        if self.step == WizardStep.STORY_SETTINGS:
            self.generate()
        self.step = WizardStep(self.step + 1)
        return self.step

    def previous_step(self) -> WizardStep:
        if self.step > WizardStep.CHILD_INFO:
            self.step = WizardStep(self.step - 1)
        return self.step

    def generate(self) -> dict:
        for step in STEP_SCHEMAS:
            self.validate_step(step)
        self.generated_book = self._post("/api/books/generate", self.book_data)
        logger.info(f"Generated book {self.generated_book.get('bookId')}: {self.generated_book.get('title')}")
        return self.generated_book

    def regenerate(self) -> dict:
        """Ask for a brand new book with the same choices; the previous result is dropped"""
        if self.generated_book is None:
            raise WizardError("Nothing to regenerate yet")
        return self.generate()

    def checkout(self, first_name: str, last_name: str, email: str, book_format: str = "hardcover", **shipping) -> dict:
        if self.generated_book is None or self.generated_book.get("bookId") is None:
            raise WizardError("Book information is missing. Please generate the book first.")
        if book_format not in FORMAT_PRICES:
            raise WizardError(f"Unknown format: {book_format}")

        payload = {
            "bookId": self.generated_book["bookId"],
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "format": book_format,
            "total": FORMAT_PRICES[book_format],
        }
        if book_format != "digital":
            payload.update({name: shipping[name] for name in SHIPPING_FIELDS if shipping.get(name)})

        try:
            CheckoutRequest.model_validate(payload)
        except ValidationError as e:
            raise WizardError(first_error_message(e)) from e

        self.order = self._post("/api/orders", payload)
        self.step = WizardStep.CHECKOUT
        return self.order

    def _post(self, path: str, payload: dict) -> dict:
        response = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        if not response.ok:
            try:
                detail = response.json().get("detail") or response.reason
            except ValueError:
                detail = response.text or response.reason
            raise WizardError(str(detail), status_code=response.status_code)
        return response.json()
