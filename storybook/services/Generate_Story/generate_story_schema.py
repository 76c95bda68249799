from typing import Annotated, List, Literal, Union

from pydantic import Field

from storybook.utils.storage_schema import CamelModel, StoryPage


class FlatStory(CamelModel):
    kind: Literal["flat"] = "flat"
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, description="The full story text with paragraphs")


class PagedStory(CamelModel):
    kind: Literal["paged"] = "paged"
    title: str = Field(..., min_length=1)
    pages: List[StoryPage] = Field(..., min_length=1, description="Pages in reading order")

    @property
    def content(self) -> str:
        return "\n\n".join(page.text for page in self.pages)


NarrativeResult = Annotated[Union[FlatStory, PagedStory], Field(discriminator="kind")]
