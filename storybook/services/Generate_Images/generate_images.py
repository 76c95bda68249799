import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from storybook.utils.image_store import ImageStore
from storybook.utils.settings import Settings
from storybook.utils.storage_schema import StoryPage
from .generate_images_schema import ImageAttempt, ImageOptions, ImageResult, ImageStage
from .image_providers import ProviderImage, build_image_provider

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "cartoon"

STYLE_DIRECTIVES = {
    "watercolor": "soft brushstrokes and flowing colors",
    "3d": "dimensional characters and realistic textures",
    "cartoon": "vibrant colors and clean outlines",
}

# Keyword groups are matched in order against whole words (plurals allowed); the first hit wins.
FALLBACK_IMAGES = [
    (("forest", "woods", "tree", "jungle"),
     "https://images.unsplash.com/photo-1516627145497-ae6968895b40?w=800&auto=format&fit=crop"),
    (("ocean", "sea", "underwater", "beach", "fish"),
     "https://images.unsplash.com/photo-1546215307-57d81716a1b9?w=800&auto=format&fit=crop"),
    (("space", "star", "planet", "rocket", "moon"),
     "https://images.unsplash.com/photo-1573505790261-dcac3e00c337?w=800&auto=format&fit=crop"),
    (("castle", "kingdom", "princess", "knight"),
     "https://images.unsplash.com/photo-1578632292113-dec9c32d0cd6?w=800&auto=format&fit=crop"),
    (("animal", "dog", "cat", "dinosaur", "pet"),
     "https://images.unsplash.com/photo-1587064712777-9767363caa82?w=800&auto=format&fit=crop"),
    (("adventure", "treasure", "explore", "journey"),
     "https://images.unsplash.com/photo-1629414278888-abcdb8e0a904?w=800&auto=format&fit=crop"),
    (("magic", "wizard", "fairy", "dragon"),
     "https://images.unsplash.com/photo-1512253229843-c2c1289d9529?w=800&auto=format&fit=crop"),
]

FALLBACK_POOL = [url for _, url in FALLBACK_IMAGES]


def _mentions(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}(?:s|es)?\b", text) is not None


def select_fallback_image(prompt: str, exclude: Iterable[str] = ()) -> str:
    """Pick a stock image for a prompt, preferring entries not in `exclude`"""
    excluded = set(exclude)
    lowered = prompt.lower()
    for keywords, url in FALLBACK_IMAGES:
        if url not in excluded and any(_mentions(lowered, keyword) for keyword in keywords):
            return url
    candidates = [url for url in FALLBACK_POOL if url not in excluded] or FALLBACK_POOL
    return candidates[len(prompt) % len(candidates)]


def fallback_for_index(index: int) -> str:
    return FALLBACK_POOL[index % len(FALLBACK_POOL)]


class GenerateImages:
    """
    Illustration adapter.

    Every call runs the same pipeline: the enriched prompt, then a shortened
    prompt, then a stock image from FALLBACK_POOL. Nothing raises past
    generate_image / generate_pages; callers always get a usable image reference.
    """

    def __init__(self, provider, image_store: ImageStore, parallel_batch_size: int = 2):
        self.provider = provider
        self.image_store = image_store
        self.parallel_batch_size = max(1, parallel_batch_size)

    @classmethod
    def from_settings(cls, settings: Settings, image_store: Optional[ImageStore] = None) -> "GenerateImages":
        image_store = image_store or ImageStore.from_settings(settings)
        return cls(
            provider=build_image_provider(settings, image_store),
            image_store=image_store,
            parallel_batch_size=settings.image_batch_size,
        )

    def generate_image(self, prompt: str, options: Optional[ImageOptions] = None) -> str:
        return self.generate_image_result(prompt, options).image_url

    def generate_image_result(
        self, prompt: str, options: Optional[ImageOptions] = None, exclude: Iterable[str] = ()
    ) -> ImageResult:
        attempt = self._generate_live(prompt, options)
        if attempt.ok:
            return ImageResult(image_url=attempt.image_url, stage=attempt.stage)
        fallback = select_fallback_image(prompt, exclude)
        logger.warning(f"Using stock image for prompt '{prompt[:60]}': {fallback}")
        return ImageResult(image_url=fallback, stage=ImageStage.FALLBACK)

    def generate_pages(
        self, pages: List[StoryPage], style: str, character_description: str, exclude: Iterable[str] = ()
    ) -> List[str]:
        """Illustrate pages in order; result[i] belongs to pages[i].

        Stock images listed in `exclude` (already shown elsewhere in the book) are avoided when possible.
        """
        if not pages:
            return []

        prompts = [self.create_page_prompt(page, index) for index, page in enumerate(pages)]
        attempts: List[Optional[ImageAttempt]] = [None] * len(pages)

        # Page 1 goes first so its picture can anchor the character for the rest
        attempts[0] = self._generate_live(
            prompts[0], ImageOptions(style=style, character_description=character_description)
        )
        anchor = attempts[0].image_url if attempts[0].ok else None
        options = ImageOptions(style=style, character_description=character_description, reference_image=anchor)

        logger.info(f"Generating {len(pages) - 1} more pages in batches of {self.parallel_batch_size}")
        with ThreadPoolExecutor(max_workers=self.parallel_batch_size) as executor:
            futures = {
                executor.submit(self._generate_live, prompts[index], options): index
                for index in range(1, len(pages))
            }
            for future in futures:
                index = futures[future]
                try:
                    attempts[index] = future.result()
                except Exception:
                    logger.exception(f"Illustration worker for page {index + 1} crashed")

        image_urls: List[Optional[str]] = [
            attempt.image_url if attempt is not None and attempt.ok else None for attempt in attempts
        ]

        used_fallbacks = set(exclude)
        for index, attempt in enumerate(attempts):
            if attempt is not None and not attempt.ok:
                fallback = select_fallback_image(prompts[index], exclude=used_fallbacks)
                used_fallbacks.add(fallback)
                image_urls[index] = fallback
                logger.warning(f"Page {index + 1} uses stock image {fallback}")

        for index, image_url in enumerate(image_urls):
            if not image_url:
                image_urls[index] = fallback_for_index(index)

        return image_urls

    def create_page_prompt(self, page: StoryPage, index: int) -> str:
        prompt = f"Page {index + 1}: {page.description}"
        if index == 0:
            prompt += " This is the first page of the story, so establish the setting and introduce the character."
        return prompt

    def create_prompt(self, prompt: str, options: ImageOptions) -> str:
        style = options.style or DEFAULT_STYLE
        directive = STYLE_DIRECTIVES.get(style.lower(), STYLE_DIRECTIVES[DEFAULT_STYLE])
        sections = [
            f"Create a children's book illustration.\n\nScene: {prompt}",
            f"Art style: {style}. Use {directive} with a child-friendly aesthetic appropriate for a children's book.",
        ]
        if options.character_description:
            sections.append(f"The illustration should feature {options.character_description}.")
        if options.character_description or options.reference_image:
            reference = " and the reference image" if options.reference_image else ""
            sections.append(
                f"CRITICAL: Keep the main character identical to the description{reference} - "
                "same facial features, hair color and style, skin tone, and outfit in every illustration."
            )
        return "\n\n".join(sections)

    def create_simplified_prompt(self, prompt: str, options: ImageOptions) -> str:
        style = options.style or DEFAULT_STYLE
        return f"Children's book illustration in {style} style: {prompt[:100]}. Art style: {style}"

    def _generate_live(self, prompt: str, options: Optional[ImageOptions] = None) -> ImageAttempt:
        options = options or ImageOptions()
        primary = self._attempt(ImageStage.PRIMARY, self.create_prompt(prompt, options), options.reference_image)
        if primary.ok:
            return primary
        logger.warning(f"Image generation failed, retrying with a simpler prompt: {primary.error}")

        simplified = self._attempt(
            ImageStage.SIMPLIFIED, self.create_simplified_prompt(prompt, options), options.reference_image
        )
        if not simplified.ok:
            logger.warning(f"Simplified image generation failed too: {simplified.error}")
        return simplified

    def _attempt(self, stage: ImageStage, prompt: str, reference_image: Optional[str]) -> ImageAttempt:
        try:
            image = self.provider.generate(prompt, reference_image=reference_image)
            return ImageAttempt(stage=stage, image_url=self._store(image))
        except Exception as e:
            return ImageAttempt(stage=stage, error=str(e) or type(e).__name__)

    def _store(self, image: ProviderImage) -> str:
        if image.data:
            return self.image_store.save(image.data)
        if image.url:
            return image.url
        raise ValueError("Provider returned neither a URL nor image data")
