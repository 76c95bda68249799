import pytest

from conftest import SUCCESS_URL, FakeImageProvider, FakeImageStore, FakeStoryGenerator
from storybook.services.Generate_Book.generate_book import GenerateBook
from storybook.services.Generate_Images.generate_images import FALLBACK_POOL, GenerateImages
from storybook.utils.errors import StoryGenerationError


@pytest.fixture
def service(storage, story_generator, image_generator):
    return GenerateBook(storage=storage, story_generator=story_generator, image_generator=image_generator)


def test_short_story_for_mia(service, book_request, image_provider, storage):
    response = service.generate_book(book_request)

    # one cover plus one call per page
    assert len(image_provider.calls) == 1 + 6
    assert len(response.pages) == 6
    assert all(page.image_url for page in response.pages)
    assert response.title == "Mia and the Stars"
    assert response.cover_image_url == SUCCESS_URL
    assert response.preview_images == [response.pages[0].image_url, response.pages[1].image_url]
    assert response.content == "\n\n".join(f"Text {i}" for i in range(6))
    assert [page.text for page in response.pages] == [f"Text {i}" for i in range(6)]

    book = storage.get_book(response.book_id)
    assert book.child_name == "Mia"
    assert book.interests == ["space", "dinosaurs"]
    assert book.format == "pending"
    assert book.price == "0"
    assert len(book.story_pages) == 6
    assert book.all_page_images == [page.image_url for page in response.pages]


def test_cover_prompt_uses_title_character_and_style(service, book_request, image_provider):
    service.generate_book(book_request)
    cover_prompt = image_provider.calls[0]["prompt"]

    assert 'Book cover for "Mia and the Stars"' in cover_prompt
    assert "Mia, a girl with curly hair and medium skin tone" in cover_prompt
    assert "soft brushstrokes and flowing colors" in cover_prompt


def test_every_page_has_an_image_even_when_provider_is_down(storage, book_request):
    generator = GenerateImages(provider=FakeImageProvider(fail_when=lambda p: True), image_store=FakeImageStore())
    service = GenerateBook(storage=storage, story_generator=FakeStoryGenerator(page_count=10), image_generator=generator)

    response = service.generate_book(book_request)

    assert len(response.pages) == 10
    assert all(page.image_url in FALLBACK_POOL for page in response.pages)
    assert response.cover_image_url in FALLBACK_POOL


def test_fewer_than_two_pages_gives_fewer_previews(storage, book_request, image_generator):
    service = GenerateBook(storage=storage, story_generator=FakeStoryGenerator(page_count=1), image_generator=image_generator)
    response = service.generate_book(book_request)
    assert len(response.preview_images) == 1


def test_generating_twice_creates_two_books(service, book_request, storage):
    first = service.generate_book(book_request)
    second = service.generate_book(book_request)
    assert first.book_id != second.book_id
    assert storage.get_book(first.book_id) is not None
    assert storage.get_book(second.book_id) is not None


def test_flat_story_gets_two_scene_illustrations(storage, book_request, image_generator, image_provider):
    service = GenerateBook(storage=storage, story_generator=FakeStoryGenerator(flat=True), image_generator=image_generator)

    response = service.generate_book(book_request)

    assert response.pages == []
    assert response.content == "Once upon a time.\n\nThe end."
    assert len(response.preview_images) == 2
    assert len(image_provider.calls) == 3
    assert "trying to find a lost treasure in a space world" in image_provider.calls[2]["prompt"]


def test_story_failure_stops_before_any_image_or_storage(storage, book_request, image_generator, image_provider):
    service = GenerateBook(
        storage=storage,
        story_generator=FakeStoryGenerator(error=StoryGenerationError()),
        image_generator=image_generator,
    )

    with pytest.raises(StoryGenerationError):
        service.generate_book(book_request)

    assert image_provider.calls == []
    assert storage.get_book(1) is None


def test_invalid_request_is_rejected_before_any_provider_call(service, book_request, story_generator, image_provider):
    book_request["interests"] = ["a", "b", "c", "d"]
    with pytest.raises(ValueError):
        service.generate_book(book_request)
    assert story_generator.calls == 0
    assert image_provider.calls == []


def test_cover_stock_image_is_not_reused_for_pages(storage, book_request):
    generator = GenerateImages(provider=FakeImageProvider(fail_when=lambda p: True), image_store=FakeImageStore())
    service = GenerateBook(storage=storage, story_generator=FakeStoryGenerator(page_count=6), image_generator=generator)

    response = service.generate_book(book_request)

    page_images = [page.image_url for page in response.pages]
    assert response.cover_image_url not in page_images
    assert len(set([response.cover_image_url] + page_images)) == 7


def test_flat_scene_stock_images_differ_from_cover(storage, book_request):
    generator = GenerateImages(provider=FakeImageProvider(fail_when=lambda p: True), image_store=FakeImageStore())
    service = GenerateBook(storage=storage, story_generator=FakeStoryGenerator(flat=True), image_generator=generator)

    response = service.generate_book(book_request)

    assert len(set([response.cover_image_url] + response.preview_images)) == 3
