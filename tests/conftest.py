import io
import os
import tempfile

# Keep runtime data of the imported config out of the working tree
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="exam-builder-tests-"))

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from exam_api.database import init_db
from exam_api.errors import StorageError
from exam_api.models.document import (
    ImageItem,
    Option,
    Part,
    Question,
    QuestionType,
    Section,
    SectionId,
    SubQuestion,
    Test,
)
from exam_api.services.blob_storage import BlobStorage
from exam_api.utils import to_data_uri


def _png_data_uri() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "red").save(buffer, format="PNG")
    return to_data_uri(buffer.getvalue(), "image/png")


PNG_DATA_URI = _png_data_uri()
JPEG_DATA_URI = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="
WAV_DATA_URI = "data:audio/wav;base64,UklGRiQAAABXQVZF"


class RecordingBlobStorage(BlobStorage):
    """In-memory blob store that records every call."""

    base_url = "https://blobs.test"

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.uploads: list[str] = []
        self.deleted: list[str] = []
        self.fail_delete: set[str] = set()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.uploads.append(path)
        self.objects[path] = (data, content_type)
        return self.url_for(path)

    def delete(self, url: str) -> None:
        self.deleted.append(url)
        if url in self.fail_delete:
            raise StorageError(f"cannot delete {url}")
        self.objects.pop(url[len(self.base_url) + 1 :], None)

    def read(self, url: str) -> bytes | None:
        entry = self.objects.get(url[len(self.base_url) + 1 :])
        return entry[0] if entry else None

    def is_durable(self, url: str) -> bool:
        return url.startswith(f"{self.base_url}/")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def blobs() -> RecordingBlobStorage:
    return RecordingBlobStorage()


def make_mcq(question_id: str, correct: int = 0, image: str | None = None) -> Question:
    return Question(
        id=question_id,
        type=QuestionType.MCQ_IMAGE if image else QuestionType.MCQ,
        text="What does Hoa like?",
        options=[
            Option(
                id=f"{question_id}-{letter}",
                label=letter,
                description=f"answer {letter}",
                is_correct=index == correct,
                image_url=image,
            )
            for index, letter in enumerate("ABC")
        ],
    )


def make_sample_test() -> Test:
    """A test touching every asset slot and most question types."""
    listening = Section(
        id=SectionId.LISTENING,
        title="Listening",
        parts=[
            Part(
                id="p-listen",
                title="Part 1: Listen and tick",
                audio_url=WAV_DATA_URI,
                questions=[make_mcq("q-listen", image=PNG_DATA_URI)],
            )
        ],
    )
    reading = Section(
        id=SectionId.READING,
        title="Reading",
        parts=[
            Part(
                id="p-read",
                title="Part 1: Read and answer",
                passage="The sky is blue.",
                questions=[
                    Question(
                        id="q-ex",
                        type=QuestionType.TRUE_FALSE,
                        text="The sky is blue",
                        is_true=True,
                        is_example=True,
                    ),
                    Question(id="q-tf1", type=QuestionType.TRUE_FALSE, text="A", is_true=False),
                    Question(id="q-tf2", type=QuestionType.TRUE_FALSE, text="B", is_true=True),
                ],
            )
        ],
    )
    writing = Section(
        id=SectionId.WRITING,
        title="Writing",
        parts=[
            Part(
                id="p-write",
                title="Part 1: Look and write",
                questions=[
                    Question(
                        id="q-fill",
                        type=QuestionType.WRITING_FILL_IN_WORD,
                        sub_questions=[
                            SubQuestion(id="s1", text="c _ t", answer="cat"),
                            SubQuestion(id="s2", text="d _ g", answer="dog"),
                        ],
                        images=[
                            ImageItem(id="s1", image_url=JPEG_DATA_URI),
                            ImageItem(id="s2"),
                        ],
                    ),
                    Question(
                        id="q-para",
                        type=QuestionType.WRITING_PARAGRAPH,
                        text="Write about your school.",
                    ),
                ],
            )
        ],
    )
    speaking = Section(
        id=SectionId.SPEAKING,
        title="Speaking",
        parts=[
            Part(
                id="p-speak",
                title="Part 1: Talk",
                questions=[
                    Question(
                        id="q-speak",
                        type=QuestionType.SPEAKING_QA,
                        text="What is your favorite subject?",
                        image_url="https://example.com/already-hosted.png",
                        reference_answer="I like science.",
                    )
                ],
            )
        ],
    )
    return Test(
        title="Mid-term test",
        sections=[listening, reading, writing, speaking],
        time_limit=40,
    )


@pytest.fixture
def sample_test() -> Test:
    return make_sample_test()
