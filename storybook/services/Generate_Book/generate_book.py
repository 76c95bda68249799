import logging
from typing import List, Union

from storybook.services.Generate_Images.generate_images import GenerateImages
from storybook.services.Generate_Images.generate_images_schema import ImageOptions
from storybook.services.Generate_Story.generate_story import GenerateStory
from storybook.utils.character_description import build_character_description
from storybook.utils.mem_storage import MemStorage
from storybook.utils.storage_schema import BookCreate
from .generate_book_schema import BookGenerationRequest, GenerateBookResponse, IllustratedPage

logger = logging.getLogger(__name__)

PREVIEW_IMAGE_COUNT = 2


class GenerateBook:
    """
    Book generation use case: story, cover, page illustrations, then one stored Book.

    Not idempotent: every call regenerates the story and pictures and stores a new
    Book, which is what "regenerate" relies on.
    """

    def __init__(self, storage: MemStorage, story_generator: GenerateStory, image_generator: GenerateImages):
        self.storage = storage
        self.story_generator = story_generator
        self.image_generator = image_generator

    def generate_book(self, request: Union[BookGenerationRequest, dict]) -> GenerateBookResponse:
        if not isinstance(request, BookGenerationRequest):
            request = BookGenerationRequest.model_validate(request)

        narrative = self.story_generator.get_generate_story(request)
        logger.info(f"Story '{narrative.title}' generated for {request.child_name} ({narrative.kind})")

        character_description = build_character_description(request)
        style = request.character_style
        image_options = ImageOptions(style=style, character_description=character_description)

        cover_image_url = self.image_generator.generate_image_result(
            self.create_cover_prompt(narrative.title, character_description), image_options
        ).image_url
        shown_images = {cover_image_url}

        if narrative.kind == "paged":
            story_pages = narrative.pages
            page_images = self.image_generator.generate_pages(
                story_pages, style, character_description, exclude=shown_images
            )
        else:
            story_pages = []
            page_images = []
            for prompt in self.create_scene_prompts(request):
                result = self.image_generator.generate_image_result(prompt, image_options, exclude=shown_images)
                image_url = result.image_url
                shown_images.add(image_url)
                page_images.append(image_url)
        preview_images = page_images[:PREVIEW_IMAGE_COUNT]

        book = self.storage.create_book(
            BookCreate(
                **request.model_dump(),
                title=narrative.title,
                story_content=narrative.content,
                cover_image_url=cover_image_url,
                preview_images=preview_images,
                all_page_images=page_images,
                story_pages=story_pages,
                format="pending",
                price="0",
            )
        )

        return GenerateBookResponse(
            book_id=book.id,
            title=narrative.title,
            content=narrative.content,
            cover_image_url=cover_image_url,
            preview_images=preview_images,
            pages=[
                IllustratedPage(text=page.text, description=page.description, image_url=image_url)
                for page, image_url in zip(story_pages, page_images)
            ],
        )

    def create_cover_prompt(self, title: str, character_description: str) -> str:
        return (
            f'Book cover for "{title}", a children\'s book. '
            f"The main character is {character_description}."
        )

    def create_scene_prompts(self, request: BookGenerationRequest) -> List[str]:
        """Two scene illustrations used when the story comes back as flat text"""
        return [
            f"Illustration for a children's book page showing {request.child_name} "
            f"in a {request.story_theme} setting, {request.character_style} style.",
            f"Illustration for a children's book showing {request.child_name} "
            f"trying to {request.story_goal} in a {request.story_theme} world.",
        ]
