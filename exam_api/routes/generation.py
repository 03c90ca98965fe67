"""Generative AI endpoints used by the builder."""
import mimetypes

from fastapi import APIRouter, HTTPException

from exam_api.dependencies import BlobsDep, GeminiDep, KnowledgeDep
from exam_api.knowledge_base import KnowledgeBase
from exam_api.models.generation import (
    CharacterImageRequest,
    ConcretizeRequest,
    EditImageRequest,
    PassageRequest,
    QuestionGenerationRequest,
    QuestionKnowledge,
    ShuffleRequest,
    SingleImageRequest,
    SpeechToTextRequest,
    StoryboardRequest,
    TextToSpeechRequest,
)
from exam_api.services.ai import flows
from exam_api.services.blob_storage import LocalBlobStorage
from exam_api.utils import to_data_uri

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _inline_stored(ref: str | None, blobs: LocalBlobStorage) -> str | None:
    """Replace a durable blob URL by a data URI so it can be sent to the model."""
    if not ref or not blobs.is_durable(ref):
        return ref
    data = blobs.read(ref)
    if data is None:
        raise HTTPException(status_code=404, detail="Image not found")
    media_type = mimetypes.guess_type(ref)[0] or "image/png"
    return to_data_uri(data, media_type)


def _lookup_knowledge(kb: KnowledgeBase, curriculum_id: str | None, unit_id: str | None):
    if not curriculum_id or not unit_id:
        return None
    knowledge = kb.generation_knowledge(curriculum_id, unit_id)
    if knowledge is None:
        raise HTTPException(status_code=404, detail="Unit not found")
    return knowledge


def _dump(model) -> dict[str, object]:
    return model.model_dump(mode="json", by_alias=True)


@router.post("/passage")
def generate_passage(
    payload: PassageRequest, client: GeminiDep, kb: KnowledgeDep
) -> dict[str, object]:
    if payload.knowledge is None:
        knowledge = _lookup_knowledge(kb, payload.curriculum_id, payload.knowledge_unit_id)
        payload = payload.model_copy(update={"knowledge": knowledge})
    return _dump(flows.generate_reading_passage(client, payload))


@router.post("/questions")
def generate_questions(
    payload: QuestionGenerationRequest, client: GeminiDep, kb: KnowledgeDep
) -> dict[str, object]:
    if payload.knowledge is None:
        knowledge = _lookup_knowledge(kb, payload.curriculum_id, payload.knowledge_unit_id)
        if knowledge is not None:
            payload = payload.model_copy(
                update={
                    "knowledge": QuestionKnowledge(
                        unit_title=knowledge.unit_title,
                        current_unit_vocabulary=knowledge.current_unit_vocabulary,
                        current_unit_sentence_patterns=knowledge.current_unit_sentence_patterns,
                    )
                }
            )
    return _dump(flows.generate_questions(client, payload))


@router.post("/storyboard")
def generate_storyboard(
    payload: StoryboardRequest, client: GeminiDep, blobs: BlobsDep
) -> dict[str, object]:
    payload = payload.model_copy(
        update={"character_image": _inline_stored(payload.character_image, blobs)}
    )
    return _dump(flows.generate_storyboard(client, payload))


@router.post("/storyboard/frame")
def generate_frame(
    payload: SingleImageRequest, client: GeminiDep, blobs: BlobsDep
) -> dict[str, object]:
    payload = payload.model_copy(
        update={"character_image": _inline_stored(payload.character_image, blobs)}
    )
    return _dump(flows.generate_single_image(client, payload))


@router.post("/character")
def generate_character(payload: CharacterImageRequest, client: GeminiDep) -> dict[str, object]:
    return _dump(flows.generate_character_image(client, payload))


@router.post("/concretize")
def concretize(payload: ConcretizeRequest, client: GeminiDep) -> dict[str, object]:
    return _dump(flows.concretize_image_prompts(client, payload))


@router.post("/shuffle")
def shuffle(payload: ShuffleRequest, client: GeminiDep) -> dict[str, object]:
    return _dump(flows.shuffle_words(client, payload))


@router.post("/tts")
def text_to_speech(payload: TextToSpeechRequest, client: GeminiDep) -> dict[str, object]:
    return _dump(flows.text_to_speech(client, payload))


@router.post("/stt")
def speech_to_text(
    payload: SpeechToTextRequest, client: GeminiDep, blobs: BlobsDep
) -> dict[str, object]:
    payload = payload.model_copy(update={"audio": _inline_stored(payload.audio, blobs)})
    return _dump(flows.speech_to_text(client, payload))


@router.post("/edit-image")
def edit_image(payload: EditImageRequest, client: GeminiDep, blobs: BlobsDep) -> dict[str, object]:
    payload = payload.model_copy(update={"image": _inline_stored(payload.image, blobs)})
    return _dump(flows.edit_image(client, payload))
