"""Content generation flows: one request model in, one response model out."""
from __future__ import annotations

import json
import logging
import random
import re
from concurrent.futures import ThreadPoolExecutor

from pydantic import TypeAdapter, ValidationError

from exam_api.config import DEFAULT_TTS_VOICE, STORYBOARD_MAX_WORKERS
from exam_api.errors import GenerationError
from exam_api.models.generation import (
    PASSAGE_WORD_COUNTS,
    CharacterImageRequest,
    ConcretizeRequest,
    ConcretizeResponse,
    EditImageRequest,
    EditImageResponse,
    GeneratedQuestion,
    ImageResponse,
    PassageRequest,
    PassageResponse,
    QuestionGenerationRequest,
    QuestionGenerationResponse,
    ShuffleRequest,
    ShuffleResponse,
    SingleImageRequest,
    SpeakerConfig,
    SpeechToTextRequest,
    SpeechToTextResponse,
    StoryboardRequest,
    StoryboardResponse,
    TextToSpeechRequest,
    TextToSpeechResponse,
)
from exam_api.services.ai import prompts
from exam_api.services.ai.audio import pcm_to_wav
from exam_api.services.ai.gemini_client import GeminiClient, media_part, text_part
from exam_api.utils import to_data_uri

log = logging.getLogger(__name__)

SHUFFLE_SEPARATOR = " / "
_TRAILING_PUNCTUATION = re.compile(r"[.!?,;:]+$")
_generated_adapter = TypeAdapter(GeneratedQuestion)


# --- passages and questions ------------------------------------------------


def generate_reading_passage(client: GeminiClient, request: PassageRequest) -> PassageResponse:
    word_count = PASSAGE_WORD_COUNTS[request.length]
    knowledge = request.knowledge
    if knowledge is not None:
        details = prompts.PASSAGE_WITH_KNOWLEDGE.format(
            unit_title=knowledge.unit_title,
            topic=request.topic,
            word_count=word_count,
            current_vocabulary=", ".join(knowledge.current_unit_vocabulary),
            current_patterns="; ".join(knowledge.current_unit_sentence_patterns),
            vocabulary=", ".join(knowledge.vocabulary),
            patterns="; ".join(knowledge.sentence_patterns),
        )
    else:
        details = prompts.PASSAGE_WITHOUT_KNOWLEDGE.format(
            topic=request.topic, word_count=word_count
        )
    passage = client.generate_text(f"{prompts.PASSAGE_CONTEXT}\n{details}")
    return PassageResponse(passage=passage.strip())


def generate_questions(
    client: GeminiClient, request: QuestionGenerationRequest
) -> QuestionGenerationResponse:
    """Generate questions for a passage.

    Items that do not match a known question shape are dropped one by one.
    """
    counts = request.question_counts
    if counts.total == 0:
        return QuestionGenerationResponse(questions=[])

    knowledge = ""
    if request.knowledge is not None:
        knowledge = prompts.QUESTIONS_KNOWLEDGE.format(
            unit_title=request.knowledge.unit_title,
            current_vocabulary=", ".join(request.knowledge.current_unit_vocabulary),
            current_patterns="; ".join(request.knowledge.current_unit_sentence_patterns),
        )
    prompt = prompts.QUESTIONS_CONTEXT + "\n" + prompts.QUESTIONS_REQUEST.format(
        passage=request.passage,
        knowledge=knowledge,
        total=counts.total,
        question_type=request.question_type,
        easy=counts.easy,
        medium=counts.medium,
        hard=counts.hard,
    )
    output = client.generate_json(prompt)
    items = output.get("questions")
    if not isinstance(items, list):
        raise GenerationError("AI failed to generate questions.")

    questions = []
    for item in items:
        try:
            questions.append(_generated_adapter.validate_python(item))
        except ValidationError:
            log.info("Dropping malformed generated question: %s", str(item)[:120])
    return QuestionGenerationResponse(questions=questions)


# --- images ----------------------------------------------------------------


def _frame_image(client: GeminiClient, frame_prompt: str, character_image: str | None) -> str:
    if character_image:
        instruction = prompts.FRAME_WITH_CHARACTER.format(
            frame=frame_prompt, negative=prompts.NEGATIVE_PROMPT
        )
        return client.generate_image([media_part(character_image), text_part(instruction)])
    return client.generate_imagen(
        prompts.FRAME_WITHOUT_CHARACTER.format(
            style=prompts.ILLUSTRATION_STYLE, frame=frame_prompt, negative=prompts.NEGATIVE_PROMPT
        )
    )


def generate_storyboard(client: GeminiClient, request: StoryboardRequest) -> StoryboardResponse:
    """One image per frame, requested concurrently; any failure fails the whole call."""
    if not request.frames:
        return StoryboardResponse(images=[])
    workers = max(1, min(STORYBOARD_MAX_WORKERS, len(request.frames)))

    # requests.Session is not shared across threads
    def frame_image(frame: str) -> str:
        with client.worker_client() as worker:
            return _frame_image(worker, frame, request.character_image)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        images = list(executor.map(frame_image, request.frames))
    return StoryboardResponse(images=images)


def generate_single_image(client: GeminiClient, request: SingleImageRequest) -> ImageResponse:
    return ImageResponse(image=_frame_image(client, request.frame_prompt, request.character_image))


def generate_character_image(
    client: GeminiClient, request: CharacterImageRequest
) -> ImageResponse:
    prompt = prompts.CHARACTER_IMAGE.format(
        style=prompts.CHARACTER_STYLE,
        character=request.character_prompt,
        negative=prompts.NEGATIVE_PROMPT,
    )
    return ImageResponse(image=client.generate_imagen(prompt))


def concretize_image_prompts(client: GeminiClient, request: ConcretizeRequest) -> ConcretizeResponse:
    if not request.prompts:
        return ConcretizeResponse(concretized_prompts=[])
    output = client.generate_json(
        prompts.CONCRETIZE.format(prompts=json.dumps(request.prompts, ensure_ascii=False))
    )
    concretized = output.get("concretizedPrompts")
    if not isinstance(concretized, list) or len(concretized) != len(request.prompts):
        log.warning("Concretize returned %r for %d prompts", concretized, len(request.prompts))
        raise GenerationError("AI failed to concretize prompts.")
    return ConcretizeResponse(concretized_prompts=[str(item) for item in concretized])


def edit_image(client: GeminiClient, request: EditImageRequest) -> EditImageResponse:
    image = request.image
    if image.startswith(("http://", "https://")):
        image = client.fetch_as_data_uri(image)
    edited = client.generate_image([media_part(image), text_part(request.prompt)])
    return EditImageResponse(edited_image=edited)


# --- word shuffle ----------------------------------------------------------


def shuffle_tokens(sentence: str) -> list[str]:
    """Words of `sentence` without its final punctuation."""
    return _TRAILING_PUNCTUATION.sub("", sentence.strip()).split()


def is_valid_shuffle(sentence: str, shuffled: str) -> bool:
    """True if `shuffled` is a " / "-joined permutation of the sentence's words."""
    tokens = [token.strip() for token in shuffled.split("/")]
    if any(not token for token in tokens):
        return False
    return sorted(tokens) == sorted(shuffle_tokens(sentence))


def local_shuffle(sentence: str, rng: random.Random | None = None) -> str:
    tokens = shuffle_tokens(sentence)
    (rng or random).shuffle(tokens)
    return SHUFFLE_SEPARATOR.join(tokens)


def shuffle_words(client: GeminiClient, request: ShuffleRequest) -> ShuffleResponse:
    sentence = request.sentence.strip()
    if not sentence:
        return ShuffleResponse(shuffled_sentence="")
    output = client.generate_json(prompts.SHUFFLE.format(sentence=sentence))
    shuffled = output.get("shuffledSentence")
    if isinstance(shuffled, str) and is_valid_shuffle(sentence, shuffled):
        tokens = [token.strip() for token in shuffled.split("/")]
        return ShuffleResponse(shuffled_sentence=SHUFFLE_SEPARATOR.join(tokens))
    log.info("Model shuffle %r is not a permutation of %r; shuffling locally", shuffled, sentence)
    return ShuffleResponse(shuffled_sentence=local_shuffle(sentence))


# --- audio -----------------------------------------------------------------


def speech_config(speakers: list[SpeakerConfig]) -> dict:
    """Voice configuration for 0, 1 or several speakers."""
    if len(speakers) > 1:
        return {
            "multiSpeakerVoiceConfig": {
                "speakerVoiceConfigs": [
                    {
                        "speaker": speaker.name,
                        "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": speaker.voice}},
                    }
                    for speaker in speakers
                ]
            }
        }
    voice = speakers[0].voice if speakers else DEFAULT_TTS_VOICE
    return {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}}}


def text_to_speech(client: GeminiClient, request: TextToSpeechRequest) -> TextToSpeechResponse:
    pcm = client.generate_speech(request.script, speech_config(request.speakers))
    return TextToSpeechResponse(audio=to_data_uri(pcm_to_wav(pcm), "audio/wav"))


def speech_to_text(client: GeminiClient, request: SpeechToTextRequest) -> SpeechToTextResponse:
    text = client.generate_text([media_part(request.audio), text_part(prompts.TRANSCRIBE)])
    return SpeechToTextResponse(text=text.strip())
