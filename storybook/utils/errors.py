class StorybookError(Exception):
    """Base class for errors raised by the storybook services"""


class NotFoundError(StorybookError):
    pass


class DuplicateUserError(StorybookError):
    pass


class StoryGenerationError(StorybookError):
    """The text provider failed or returned something that is not a story"""

    def __init__(self, message: str = "Failed to generate story. Please try again later."):
        super().__init__(message)


class ImageProviderError(StorybookError):
    """Raised by image providers; the illustration adapter never lets it escape"""


class BadRequestError(StorybookError):
    pass
