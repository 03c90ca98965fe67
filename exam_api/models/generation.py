"""Request/response models for the generative AI flows."""
from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PassageLength(str, enum.Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


PASSAGE_WORD_COUNTS = {
    PassageLength.SHORT: "about 100 words",
    PassageLength.MEDIUM: "about 150 words",
    PassageLength.LONG: "about 200 words",
}


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class PassageKnowledge(WireModel):
    unit_title: str
    vocabulary: list[str] = Field(default_factory=list)
    sentence_patterns: list[str] = Field(default_factory=list)
    current_unit_vocabulary: list[str] = Field(default_factory=list)
    current_unit_sentence_patterns: list[str] = Field(default_factory=list)


class QuestionKnowledge(WireModel):
    unit_title: str
    current_unit_vocabulary: list[str] = Field(default_factory=list)
    current_unit_sentence_patterns: list[str] = Field(default_factory=list)


class PassageRequest(WireModel):
    topic: str
    length: PassageLength = PassageLength.MEDIUM
    knowledge: PassageKnowledge | None = None
    # Used to look up `knowledge` when it is not sent inline
    curriculum_id: str | None = None
    knowledge_unit_id: str | None = None


class PassageResponse(WireModel):
    passage: str


class QuestionCounts(WireModel):
    easy: NonNegativeInt = 0
    medium: NonNegativeInt = 0
    hard: NonNegativeInt = 0

    @property
    def total(self) -> int:
        return self.easy + self.medium + self.hard


GeneratedQuestionTag = Literal["mcq", "fib", "true-false"]


class QuestionGenerationRequest(WireModel):
    passage: str
    question_type: GeneratedQuestionTag
    question_counts: QuestionCounts
    knowledge: QuestionKnowledge | None = None
    curriculum_id: str | None = None
    knowledge_unit_id: str | None = None


class GeneratedOption(WireModel):
    text: str
    is_correct: bool


class GeneratedMcq(WireModel):
    type: Literal["mcq"]
    question: str
    options: list[GeneratedOption] = Field(min_length=3, max_length=3)
    difficulty: Difficulty = Difficulty.MEDIUM


class GeneratedFib(WireModel):
    type: Literal["fib"]
    question: str
    answer: str
    difficulty: Difficulty = Difficulty.MEDIUM


class GeneratedTrueFalse(WireModel):
    type: Literal["true-false"]
    statement: str
    is_true: bool
    difficulty: Difficulty = Difficulty.MEDIUM


GeneratedQuestion = Annotated[
    Union[GeneratedMcq, GeneratedFib, GeneratedTrueFalse],
    Field(discriminator="type"),
]


class QuestionGenerationResponse(WireModel):
    questions: list[GeneratedQuestion] = Field(default_factory=list)


class StoryboardRequest(WireModel):
    character_image: str | None = None
    frames: list[str]


class StoryboardResponse(WireModel):
    images: list[str]


class SingleImageRequest(WireModel):
    character_image: str | None = None
    frame_prompt: str


class CharacterImageRequest(WireModel):
    character_prompt: str


class ImageResponse(WireModel):
    image: str


class ConcretizeRequest(WireModel):
    prompts: list[str]


class ConcretizeResponse(WireModel):
    concretized_prompts: list[str]


class ShuffleRequest(WireModel):
    sentence: str


class ShuffleResponse(WireModel):
    shuffled_sentence: str


class SpeakerConfig(WireModel):
    name: str
    voice: str


class TextToSpeechRequest(WireModel):
    script: str
    speakers: list[SpeakerConfig] = Field(default_factory=list)


class TextToSpeechResponse(WireModel):
    audio: str


class SpeechToTextRequest(WireModel):
    audio: str


class SpeechToTextResponse(WireModel):
    text: str


class EditImageRequest(WireModel):
    image: str
    prompt: str


class EditImageResponse(WireModel):
    edited_image: str
