import pytest
from fastapi.testclient import TestClient

from conftest import FakeStoryGenerator
from main import create_app
from storybook.utils.errors import StoryGenerationError


@pytest.fixture
def client(settings, storage, story_generator, image_generator):
    app = create_app(
        settings=settings,
        storage=storage,
        story_generator=story_generator,
        image_generator=image_generator,
    )
    with TestClient(app) as test_client:
        yield test_client


def generate(client, book_request):
    response = client.post("/api/books/generate", json=book_request)
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_generate_book(client, book_request):
    body = generate(client, book_request)

    assert body["bookId"] == 1
    assert body["title"] == "Mia and the Stars"
    assert body["coverImageUrl"]
    assert len(body["previewImages"]) == 2
    assert len(body["pages"]) == 6
    assert set(body["pages"][0]) == {"text", "description", "imageUrl"}
    assert all(page["imageUrl"] for page in body["pages"])


@pytest.mark.parametrize(
    "field, value",
    [
        ("interests", []),
        ("interests", ["a", "b", "c", "d"]),
        ("companions", ["dog", "cat", "owl"]),
        ("childName", ""),
    ],
)
def test_invalid_book_request_is_400_without_provider_calls(
    client, book_request, story_generator, image_provider, field, value
):
    book_request[field] = value
    response = client.post("/api/books/generate", json=book_request)

    assert response.status_code == 400
    assert field in response.json()["detail"]
    assert story_generator.calls == 0
    assert image_provider.calls == []


def test_missing_field_is_400(client, book_request):
    del book_request["storyGoal"]
    response = client.post("/api/books/generate", json=book_request)
    assert response.status_code == 400
    assert "storyGoal" in response.json()["detail"]


def test_story_failure_is_500_with_generic_message(settings, storage, image_generator, book_request):
    app = create_app(
        settings=settings,
        storage=storage,
        story_generator=FakeStoryGenerator(error=StoryGenerationError()),
        image_generator=image_generator,
    )
    with TestClient(app) as client:
        response = client.post("/api/books/generate", json=book_request)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate story. Please try again later."


def test_unexpected_failure_is_500_without_internals(settings, storage, image_generator, book_request):
    app = create_app(
        settings=settings,
        storage=storage,
        story_generator=FakeStoryGenerator(error=KeyError("secret internals")),
        image_generator=image_generator,
    )
    with TestClient(app) as client:
        response = client.post("/api/books/generate", json=book_request)

    assert response.status_code == 500
    assert "secret" not in response.text


def test_two_generations_give_two_books(client, book_request):
    assert generate(client, book_request)["bookId"] != generate(client, book_request)["bookId"]


def test_get_book(client, book_request):
    book_id = generate(client, book_request)["bookId"]
    body = client.get(f"/api/books/{book_id}").json()
    assert body["childName"] == "Mia"
    assert body["format"] == "pending"
    assert len(body["storyPages"]) == 6
    assert client.get("/api/books/999").status_code == 404


def test_order_round_trip(client, book_request, checkout_request, storage):
    book_id = generate(client, book_request)["bookId"]
    checkout_request["bookId"] = book_id

    response = client.post("/api/orders", json=checkout_request)

    assert response.status_code == 201
    order = response.json()
    assert order["bookId"] == book_id
    assert order["status"] == "pending"
    assert order["email"] == "ana@example.com"
    assert order["zip"] == "62701"
    assert order["id"] == 1

    book = storage.get_book(book_id)
    assert book.format == "hardcover"
    assert book.price == "$29.99"
    assert client.get(f"/api/orders/{order['id']}").json()["total"] == "$29.99"


def test_order_for_unknown_book_is_404(client, book_request, checkout_request, storage):
    book_id = generate(client, book_request)["bookId"]
    checkout_request["bookId"] = book_id + 100

    response = client.post("/api/orders", json=checkout_request)

    assert response.status_code == 404
    assert storage.count_orders() == 0
    assert storage.get_book(book_id).format == "pending"


@pytest.mark.parametrize("book_id", [None, 0])
def test_order_without_book_id_is_400(client, checkout_request, storage, book_id):
    if book_id is not None:
        checkout_request["bookId"] = book_id
    response = client.post("/api/orders", json=checkout_request)
    assert response.status_code == 400
    assert response.json()["detail"] == "Book ID is required"
    assert storage.count_orders() == 0


def test_order_with_bad_email_is_400(client, book_request, checkout_request):
    checkout_request["bookId"] = generate(client, book_request)["bookId"]
    checkout_request["email"] = "nope"
    response = client.post("/api/orders", json=checkout_request)
    assert response.status_code == 400
    assert "email" in response.json()["detail"]


def test_digital_order_without_shipping(client, book_request, checkout_request):
    checkout_request["bookId"] = generate(client, book_request)["bookId"]
    checkout_request.update(format="digital", total="$14.99")
    for field in ("address", "city", "state", "zip"):
        checkout_request.pop(field)

    response = client.post("/api/orders", json=checkout_request)

    assert response.status_code == 201
    assert response.json()["address"] is None
