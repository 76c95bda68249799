from dataclasses import dataclass


@dataclass(frozen=True)
class StoryLengthPlan:
    label: str
    words: str
    pages: int


STORY_LENGTH_PLANS = {
    "1": StoryLengthPlan(label="short", words="300-500", pages=6),
    "2": StoryLengthPlan(label="medium", words="500-800", pages=10),
    "3": StoryLengthPlan(label="long", words="800-1200", pages=14),
}


def story_length_plan(story_length: str) -> StoryLengthPlan:
    """Map the story length tier to its word and page targets; unknown tiers read as medium"""
    return STORY_LENGTH_PLANS.get(story_length, STORY_LENGTH_PLANS["2"])


def gender_noun(child_gender: str) -> str:
    return "child" if child_gender == "neutral" else child_gender


def build_character_description(request) -> str:
    """
    Describe the main character for story and illustration prompts.

    `request` is any object carrying the book request attributes (child_name, hair_style, ...).

    The base description (name, gender, hair style, skin tone) is always present.
    Optional appearance attributes are appended only when set; nothing is defaulted.
    """
    description = (
        f"{request.child_name}, a {gender_noun(request.child_gender)} "
        f"with {request.hair_style} hair and {request.skin_tone} skin tone"
    )

    details = []
    if request.hair_color:
        details.append(f"{request.hair_color} hair")
    if request.eye_color:
        details.append(f"{request.eye_color} eyes")
    if request.height:
        details.append(f"{request.height} height")
    if request.build_type:
        details.append(f"{request.build_type} build")
    if request.facial_features:
        details.append(f"facial features: {', '.join(request.facial_features)}")
    if request.clothing_style:
        details.append(f"wearing {request.clothing_style} clothes")
    if request.accessories:
        details.append(f"with accessories: {', '.join(request.accessories)}")

    if details:
        description += f". They have {'; '.join(details)}."
    return description
