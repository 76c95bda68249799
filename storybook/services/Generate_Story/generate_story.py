import json
import logging
from typing import Optional

import openai

from storybook.services.Generate_Book.generate_book_schema import BookGenerationRequest
from storybook.utils.character_description import build_character_description, story_length_plan
from storybook.utils.errors import StoryGenerationError
from storybook.utils.settings import Settings
from .generate_story_schema import FlatStory, NarrativeResult, PagedStory

logger = logging.getLogger(__name__)

FLAT_SYSTEM_PROMPT = (
    "You are a professional children's book author who specializes in creating "
    "personalized stories that feature the child as the main character."
)
PAGED_SYSTEM_PROMPT = (
    "You are a professional children's book author and illustrator who specializes in "
    "creating visual stories that feature a child as the main character."
)


class GenerateStory:
    def __init__(
        self,
        client: Optional[openai.OpenAI] = None,
        model: str = "gpt-4o",
        mode: str = "paged",
        api_key: Optional[str] = None,
        timeout: float = 120.0,
        max_retries: int = 0,
    ):
        if mode not in ("paged", "flat"):
            raise ValueError(f"Unknown story mode: {mode}")
        self._client = client
        self.model = model
        self.mode = mode
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerateStory":
        return cls(
            model=settings.openai_model,
            mode=settings.story_mode,
            api_key=settings.openai_api_key,
            timeout=settings.provider_timeout,
        )

    @property
    def client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=self.max_retries)
        return self._client

    def get_generate_story(self, request: BookGenerationRequest) -> NarrativeResult:
        """Generate the narrative in the configured shape"""
        if self.mode == "flat":
            return self.generate_story(request)
        return self.generate_visual_story(request)

    def generate_story(self, request: BookGenerationRequest) -> FlatStory:
        try:
            data = self.get_openai_response(FLAT_SYSTEM_PROMPT, self.create_prompt(request))
            return FlatStory(title=data.get("title"), content=data.get("content"))
        except Exception as e:
            logger.exception(f"Story generation failed for {request.child_name}: {e}")
            raise StoryGenerationError() from e

    def generate_visual_story(self, request: BookGenerationRequest) -> PagedStory:
        plan = story_length_plan(request.story_length)
        try:
            data = self.get_openai_response(PAGED_SYSTEM_PROMPT, self.create_visual_prompt(request))
            story = PagedStory(title=data.get("title"), pages=data.get("pages"))
        except Exception as e:
            logger.exception(f"Visual story generation failed for {request.child_name}: {e}")
            raise StoryGenerationError() from e

        if len(story.pages) != plan.pages:
            logger.warning(f"Asked for {plan.pages} pages, provider returned {len(story.pages)}")
        return story

    def create_prompt(self, request: BookGenerationRequest) -> str:
        plan = story_length_plan(request.story_length)
        companions = (
            f"Companions: {', '.join(request.companions)}" if request.companions else "No companions"
        )
        return f"""Create a {plan.label} (approximately {plan.words} words) children's story for a {request.child_age} year old with the following details:

Main Character: {build_character_description(request)}

Interests: {', '.join(request.interests)}

Story Theme: {request.story_theme}

Main Goal: {request.child_name} needs to {request.story_goal}

{companions}

The story should be engaging, age-appropriate, and educational. Include dialog and descriptive scenes. Make sure the story has a clear beginning, middle, and end, with a positive message or lesson. Avoid any scary, violent, or inappropriate content.

Format your response as JSON with the following structure:
{{
  "title": "The title of the story",
  "content": "The full story text with proper paragraphs"
}}"""

    def create_visual_prompt(self, request: BookGenerationRequest) -> str:
        plan = story_length_plan(request.story_length)
        companions = (
            f"- Companions: {', '.join(request.companions)}" if request.companions else "- No companions"
        )
        return f"""Create a children's picture book with {plan.pages} pages (approximately {plan.words} words in total) about {build_character_description(request)}.

Story details:
- Age group: {request.child_age}
- Interests: {', '.join(request.interests)}
- Theme: {request.story_theme}
- Goal: {request.child_name} needs to {request.story_goal}
{companions}
- Art style: {request.character_style}

The story should be engaging, age-appropriate, and educational with a clear beginning, middle, and end.
Include a positive message or lesson.
Make each page have a short paragraph and a clear scene to illustrate.

Format your response as JSON with this structure:
{{
  "title": "The title of the story",
  "pages": [
    {{
      "text": "Text for page 1 (1-3 sentences)",
      "description": "Detailed visual description for illustration"
    }},
    ...and so on for each of the {plan.pages} pages
  ]
}}"""

    def get_openai_response(self, system_prompt: str, prompt: str) -> dict:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=4000,
            response_format={"type": "json_object"},
        )

        response_content = (completion.choices[0].message.content or "{}").strip()
        response_data = json.loads(response_content)
        if not isinstance(response_data, dict):
            raise ValueError(f"Expected a JSON object, got {type(response_data).__name__}")
        return response_data
