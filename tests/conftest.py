import json
import threading
from types import SimpleNamespace

import pytest

from storybook.services.Generate_Images.generate_images import GenerateImages
from storybook.services.Generate_Images.image_providers import ProviderImage
from storybook.services.Generate_Story.generate_story_schema import FlatStory, PagedStory
from storybook.utils.errors import ImageProviderError
from storybook.utils.mem_storage import MemStorage
from storybook.utils.settings import Settings
from storybook.utils.storage_schema import StoryPage

SUCCESS_URL = "https://cdn.example.com/generated.png"


class FakeChatCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Stands in for openai.OpenAI; only chat.completions.create is used"""

    def __init__(self, content=None, error=None):
        self.chat = SimpleNamespace(completions=FakeChatCompletions(content, error))

    @property
    def calls(self):
        return self.chat.completions.calls


class FakeImageProvider:
    def __init__(self, url=SUCCESS_URL, fail_when=None, data=None):
        self.url = url
        self.data = data
        self.fail_when = fail_when or (lambda prompt: False)
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def generate(self, prompt, reference_image=None):
        with self._lock:
            self.calls.append({"prompt": prompt, "reference_image": reference_image})
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.fail_when(prompt):
                raise ImageProviderError("provider unavailable")
            return ProviderImage(url=None if self.data else self.url, data=self.data)
        finally:
            with self._lock:
                self.active -= 1


class FakeImageStore:
    def __init__(self):
        self.saved = []

    def save(self, image_bytes):
        self.saved.append(image_bytes)
        return f"/images/fake_{len(self.saved)}.png"

    def load(self, image_ref):
        return b""


class FakeStoryGenerator:
    def __init__(self, page_count=6, flat=False, error=None):
        self.page_count = page_count
        self.flat = flat
        self.error = error
        self.calls = 0

    def get_generate_story(self, request):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.flat:
            return FlatStory(title="Mia and the Stars", content="Once upon a time.\n\nThe end.")
        return PagedStory(
            title=f"{request.child_name} and the Stars",
            pages=[
                StoryPage(text=f"Text {i}", description=f"scene-{i} under the night sky")
                for i in range(self.page_count)
            ],
        )


def paged_story_json(page_count=6):
    return json.dumps({
        "title": "Mia's Space Adventure",
        "pages": [
            {"text": f"Page {i} text.", "description": f"Mia floating past planet {i}"}
            for i in range(page_count)
        ],
    })


@pytest.fixture
def book_request():
    return {
        "childName": "Mia",
        "childAge": "3-5",
        "childGender": "girl",
        "interests": ["space", "dinosaurs"],
        "characterStyle": "watercolor",
        "hairStyle": "curly",
        "skinTone": "medium",
        "storyTheme": "space",
        "storyGoal": "find a lost treasure",
        "companions": ["dog"],
        "storyLength": "1",
    }


@pytest.fixture
def checkout_request():
    return {
        "firstName": "Ana",
        "lastName": "Diaz",
        "email": "ana@example.com",
        "format": "hardcover",
        "total": "$29.99",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
    }


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture
def image_provider():
    return FakeImageProvider()


@pytest.fixture
def image_generator(image_provider):
    return GenerateImages(provider=image_provider, image_store=FakeImageStore(), parallel_batch_size=2)


@pytest.fixture
def story_generator():
    return FakeStoryGenerator(page_count=6)


@pytest.fixture
def settings(tmp_path):
    return Settings(images_dir=str(tmp_path / "images"))
