import base64
import io
import json
import random
import threading
import wave

import pytest
import requests

from exam_api.config import GEMINI_TEXT_MODEL, IMAGEN_MODEL
from exam_api.errors import GenerationError
from exam_api.models.generation import (
    ConcretizeRequest,
    EditImageRequest,
    PassageKnowledge,
    PassageRequest,
    QuestionGenerationRequest,
    ShuffleRequest,
    SpeakerConfig,
    SpeechToTextRequest,
    StoryboardRequest,
    TextToSpeechRequest,
)
from exam_api.services.ai import flows, gemini_client
from exam_api.services.ai.gemini_client import GeminiClient
from exam_api.utils import parse_data_uri

CHARACTER = "data:image/png;base64," + base64.b64encode(b"character").decode("ascii")


class FakeResponse:
    def __init__(self, payload=None, status_code=200, content=b"", headers=None):
        self._payload = payload
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """Answers every POST through `responder(url, payload)`."""

    def __init__(self):
        self.headers = {}
        self.calls = []
        self.responder = lambda url, payload: text_response("")
        self.get_response = FakeResponse()
        self.opened = 0
        self.closed = 0
        self.lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        with self.lock:
            self.closed += 1

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json))
        response = self.responder(url, json)
        return response if isinstance(response, FakeResponse) else FakeResponse(response)

    def get(self, url, timeout=None):
        self.calls.append((url, None))
        return self.get_response


def text_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def json_response(payload: dict) -> dict:
    return text_response(json.dumps(payload))


def inline_response(data: bytes, mime_type: str = "image/png") -> dict:
    encoded = base64.b64encode(data).decode("ascii")
    return {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": mime_type, "data": encoded}}]}}]}


def prompt_text(payload: dict) -> str:
    if "instances" in payload:
        return payload["instances"][0]["prompt"]
    parts = payload["contents"][0]["parts"]
    return "".join(part.get("text", "") for part in parts)


@pytest.fixture
def session(monkeypatch: pytest.MonkeyPatch) -> FakeSession:
    fake = FakeSession()

    def open_session():
        with fake.lock:
            fake.opened += 1
        return fake

    monkeypatch.setattr(gemini_client.requests, "Session", open_session)
    return fake


@pytest.fixture
def client(session: FakeSession) -> GeminiClient:
    return GeminiClient(api_key="test-key")


def test_missing_api_key_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gemini_client, "GEMINI_API_KEY", None)
    with pytest.raises(GenerationError):
        GeminiClient()


def test_passage_without_knowledge(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: text_response("  Hi, I'm Hoa. I like science.\n")

    result = flows.generate_reading_passage(client, PassageRequest(topic="my school", length="short"))

    assert result.passage == "Hi, I'm Hoa. I like science."
    url, payload = session.calls[0]
    assert url.endswith(f"/models/{GEMINI_TEXT_MODEL}:generateContent")
    assert session.headers["x-goog-api-key"] == "test-key"
    prompt = prompt_text(payload)
    assert "Topic: my school" in prompt
    assert "about 100 words" in prompt


def test_passage_with_knowledge_lists_unit_focus(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: text_response("passage")
    knowledge = PassageKnowledge(
        unit_title="Unit 1: SCHOOL",
        vocabulary=["science", "math"],
        sentence_patterns=["I like science."],
        current_unit_vocabulary=["science"],
        current_unit_sentence_patterns=["I like science."],
    )

    flows.generate_reading_passage(client, PassageRequest(topic="school", knowledge=knowledge))

    prompt = prompt_text(session.calls[0][1])
    assert "Curriculum unit: Unit 1: SCHOOL" in prompt
    assert "Vocabulary: science, math" in prompt


def test_questions_with_zero_counts_make_no_call(client: GeminiClient, session: FakeSession) -> None:
    request = QuestionGenerationRequest(passage="text", question_type="mcq", question_counts={})
    assert flows.generate_questions(client, request).questions == []
    assert session.calls == []


def test_questions_drop_malformed_items(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: json_response(
        {
            "questions": [
                {"type": "fib", "question": "Hoa likes ___.", "answer": "science", "difficulty": "easy"},
                {"type": "fib", "question": "no answer"},
                {"type": "true-false", "statement": "Hoa is ten.", "isTrue": True},
                {"type": "essay", "question": "Why?"},
            ]
        }
    )
    request = QuestionGenerationRequest(
        passage="Hoa likes science.",
        question_type="fib",
        question_counts={"easy": 1, "medium": 1, "hard": 1},
    )

    result = flows.generate_questions(client, request)

    assert [q.type for q in result.questions] == ["fib", "true-false"]
    payload = session.calls[0][1]
    assert payload["generationConfig"]["responseMimeType"] == "application/json"
    assert "Generate 3 questions" in prompt_text(payload)


def test_questions_without_list_fail(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: json_response({"items": []})
    request = QuestionGenerationRequest(
        passage="text", question_type="mcq", question_counts={"easy": 1}
    )
    with pytest.raises(GenerationError):
        flows.generate_questions(client, request)


def test_transport_error_becomes_generation_error(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: FakeResponse(status_code=503)
    with pytest.raises(GenerationError):
        flows.generate_reading_passage(client, PassageRequest(topic="x"))


def test_shuffle_accepts_model_permutation(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: json_response({"shuffledSentence": "school/ I /to / go"})
    result = flows.shuffle_words(client, ShuffleRequest(sentence="I go to school."))
    assert result.shuffled_sentence == "school / I / to / go"


def test_shuffle_falls_back_when_words_change(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: json_response({"shuffledSentence": "school / We / to / go"})
    result = flows.shuffle_words(client, ShuffleRequest(sentence="I go to school."))
    assert flows.is_valid_shuffle("I go to school.", result.shuffled_sentence)


def test_shuffle_empty_sentence_makes_no_call(client: GeminiClient, session: FakeSession) -> None:
    assert flows.shuffle_words(client, ShuffleRequest(sentence="   ")).shuffled_sentence == ""
    assert session.calls == []


def test_shuffle_helpers() -> None:
    assert flows.shuffle_tokens("Where were you last night?") == ["Where", "were", "you", "last", "night"]
    assert flows.is_valid_shuffle("I like it.", "it / like / I")
    assert not flows.is_valid_shuffle("I like it.", "it / like")
    assert not flows.is_valid_shuffle("I like it.", "it / / like / I")

    shuffled = flows.local_shuffle("I go to school.", random.Random(3))
    assert sorted(shuffled.split(" / ")) == ["I", "go", "school", "to"]


def test_speech_config_variants() -> None:
    assert flows.speech_config([]) == {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": "Algenib"}}}
    assert flows.speech_config([SpeakerConfig(name="Narrator", voice="Kore")]) == {
        "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": "Kore"}}
    }
    multi = flows.speech_config(
        [SpeakerConfig(name="Hoa", voice="Kore"), SpeakerConfig(name="Minh", voice="Puck")]
    )
    configs = multi["multiSpeakerVoiceConfig"]["speakerVoiceConfigs"]
    assert [c["speaker"] for c in configs] == ["Hoa", "Minh"]
    assert configs[1]["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"] == "Puck"


def test_text_to_speech_returns_wav(client: GeminiClient, session: FakeSession) -> None:
    pcm = b"\x01\x00" * 240
    session.responder = lambda url, payload: inline_response(pcm, "audio/L16;rate=24000")

    result = flows.text_to_speech(client, TextToSpeechRequest(script="Hello!"))

    payload = parse_data_uri(result.audio)
    assert payload.media_type == "audio/wav"
    with wave.open(io.BytesIO(payload.data), "rb") as reader:
        assert reader.getframerate() == 24000
        assert reader.getnchannels() == 1
        assert reader.getsampwidth() == 2
        assert reader.readframes(reader.getnframes()) == pcm
    config = session.calls[0][1]["generationConfig"]
    assert config["responseModalities"] == ["AUDIO"]


def test_text_to_speech_without_audio_fails(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: text_response("sorry")
    with pytest.raises(GenerationError):
        flows.text_to_speech(client, TextToSpeechRequest(script="Hello!"))


def test_speech_to_text_sends_audio(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: text_response(" I like science. ")
    audio = "data:audio/wav;base64," + base64.b64encode(b"RIFF").decode("ascii")

    result = flows.speech_to_text(client, SpeechToTextRequest(audio=audio))

    assert result.text == "I like science."
    inline = session.calls[0][1]["contents"][0]["parts"][0]["inlineData"]
    assert inline["mimeType"] == "audio/wav"
    assert base64.b64decode(inline["data"]) == b"RIFF"


def test_concretize_keeps_order(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: json_response(
        {"concretizedPrompts": ["a yellow piece of butter on a plate", "a red apple"]}
    )
    result = flows.concretize_image_prompts(client, ConcretizeRequest(prompts=["butter", "apple"]))
    assert result.concretized_prompts == ["a yellow piece of butter on a plate", "a red apple"]


def test_concretize_length_mismatch_fails(client: GeminiClient, session: FakeSession) -> None:
    session.responder = lambda url, payload: json_response({"concretizedPrompts": ["only one"]})
    with pytest.raises(GenerationError):
        flows.concretize_image_prompts(client, ConcretizeRequest(prompts=["butter", "apple"]))


def _frame_responder(url, payload):
    prompt = prompt_text(payload)
    for frame in ("frame-one", "frame-two", "frame-three"):
        if frame in prompt:
            return inline_response(frame.encode("ascii"))
    return FakeResponse(status_code=400)


def test_storyboard_with_character_keeps_frame_order(client: GeminiClient, session: FakeSession) -> None:
    session.responder = _frame_responder
    request = StoryboardRequest(character_image=CHARACTER, frames=["frame-one", "frame-two", "frame-three"])

    result = flows.generate_storyboard(client, request)

    assert [parse_data_uri(image).data for image in result.images] == [b"frame-one", b"frame-two", b"frame-three"]
    assert len(session.calls) == 3
    for _, payload in session.calls:
        assert base64.b64decode(payload["contents"][0]["parts"][0]["inlineData"]["data"]) == b"character"


def test_storyboard_workers_use_their_own_sessions(client: GeminiClient, session: FakeSession) -> None:
    session.responder = _frame_responder
    request = StoryboardRequest(character_image=CHARACTER, frames=["frame-one", "frame-two", "frame-three"])
    assert session.opened == 1

    flows.generate_storyboard(client, request)

    assert session.opened == 4
    assert session.closed == 3
    assert session.headers["x-goog-api-key"] == "test-key"


def test_storyboard_without_character_uses_imagen(client: GeminiClient, session: FakeSession) -> None:
    def responder(url, payload):
        encoded = base64.b64encode(b"img").decode("ascii")
        return {"predictions": [{"bytesBase64Encoded": encoded, "mimeType": "image/png"}]}

    session.responder = responder
    result = flows.generate_storyboard(client, StoryboardRequest(frames=["a cat", "a dog"]))

    assert len(result.images) == 2
    assert all(url.endswith(f"/models/{IMAGEN_MODEL}:predict") for url, _ in session.calls)


def test_storyboard_single_failure_fails_the_call(client: GeminiClient, session: FakeSession) -> None:
    def responder(url, payload):
        if "frame-two" in prompt_text(payload):
            return FakeResponse(status_code=500)
        return _frame_responder(url, payload)

    session.responder = responder
    request = StoryboardRequest(character_image=CHARACTER, frames=["frame-one", "frame-two"])
    with pytest.raises(GenerationError):
        flows.generate_storyboard(client, request)


def test_storyboard_without_frames(client: GeminiClient, session: FakeSession) -> None:
    assert flows.generate_storyboard(client, StoryboardRequest(frames=[])).images == []
    assert session.calls == []


def test_edit_image_fetches_remote_source(client: GeminiClient, session: FakeSession) -> None:
    session.get_response = FakeResponse(content=b"jpeg-bytes", headers={"content-type": "image/jpeg; charset=binary"})
    session.responder = lambda url, payload: inline_response(b"edited")

    result = flows.edit_image(
        client, EditImageRequest(image="https://example.com/cat.jpg", prompt="make it blue")
    )

    assert parse_data_uri(result.edited_image).data == b"edited"
    assert session.calls[0] == ("https://example.com/cat.jpg", None)
    inline = session.calls[1][1]["contents"][0]["parts"][0]["inlineData"]
    assert inline["mimeType"] == "image/jpeg"
    assert base64.b64decode(inline["data"]) == b"jpeg-bytes"
    # the download session is closed; the API session stays open
    assert session.opened == 2
    assert session.closed == 1
