import pytest
from pydantic import ValidationError

from storybook.services.Create_Order.create_order_schema import CheckoutRequest
from storybook.services.Generate_Book.generate_book_schema import BookGenerationRequest


def test_book_request_accepts_camel_case(book_request):
    request = BookGenerationRequest.model_validate(book_request)
    assert request.child_name == "Mia"
    assert request.interests == ["space", "dinosaurs"]
    assert request.hair_color is None
    assert request.accessories == []


def test_book_request_accepts_snake_case():
    request = BookGenerationRequest(
        child_name="Leo",
        child_age="6-8",
        child_gender="boy",
        interests=["trains"],
        character_style="cartoon",
        hair_style="short",
        skin_tone="light",
        story_theme="adventure",
        story_goal="rescue a friend",
        story_length="2",
    )
    assert request.companions == []


@pytest.mark.parametrize("interests", [[], ["a", "b", "c", "d"]])
def test_interests_must_be_between_one_and_three(book_request, interests):
    book_request["interests"] = interests
    with pytest.raises(ValidationError):
        BookGenerationRequest.model_validate(book_request)


def test_at_most_two_companions(book_request):
    book_request["companions"] = ["dog", "cat", "owl"]
    with pytest.raises(ValidationError):
        BookGenerationRequest.model_validate(book_request)


def test_at_most_three_accessories(book_request):
    book_request["accessories"] = ["hat", "scarf", "watch", "glasses"]
    with pytest.raises(ValidationError):
        BookGenerationRequest.model_validate(book_request)


@pytest.mark.parametrize("field", ["childName", "hairStyle", "storyTheme", "storyGoal", "storyLength"])
def test_required_strings_must_not_be_empty(book_request, field):
    book_request[field] = ""
    with pytest.raises(ValidationError):
        BookGenerationRequest.model_validate(book_request)


def test_gender_is_a_closed_set(book_request):
    book_request["childGender"] = "dragon"
    with pytest.raises(ValidationError):
        BookGenerationRequest.model_validate(book_request)


def test_checkout_requires_valid_email(checkout_request):
    checkout_request["email"] = "not-an-email"
    with pytest.raises(ValidationError):
        CheckoutRequest.model_validate(checkout_request)


def test_checkout_shipping_is_optional(checkout_request):
    for field in ("address", "city", "state", "zip"):
        checkout_request.pop(field)
    checkout = CheckoutRequest.model_validate(checkout_request)
    assert checkout.book_id is None
    assert checkout.zip is None
