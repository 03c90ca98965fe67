"""Word (.docx) export of the student view of a test."""
from __future__ import annotations

import io
import logging

from docx import Document
from docx.shared import Inches
from PIL import Image, UnidentifiedImageError

from exam_api.models.document import QuestionType, Test
from exam_api.models.preview import PreviewPart, PreviewQuestion
from exam_api.services.blob_storage import BlobStorage
from exam_api.services.preview_service import build_preview
from exam_api.utils import is_data_uri, parse_data_uri

log = logging.getLogger(__name__)

END_MARKER = "--- END ---"
QUESTION_IMAGE_WIDTH = Inches(2.0)
OPTION_IMAGE_WIDTH = Inches(1.2)


def _format_score(value: float) -> str:
    return f"{value:g}"


def _to_png(data: bytes) -> io.BytesIO | None:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA", "L"):
                img = img.convert("RGBA")
            output = io.BytesIO()
            img.save(output, format="PNG")
    except (UnidentifiedImageError, OSError) as exc:
        log.warning("Skipping image that could not be converted to PNG: %s", exc)
        return None
    output.seek(0)
    return output


class _DocxWriter:
    def __init__(self, blobs: BlobStorage):
        self.blobs = blobs
        self.doc = Document()

    def _image_bytes(self, ref: str) -> bytes | None:
        if is_data_uri(ref):
            try:
                return parse_data_uri(ref).data
            except ValueError:
                log.warning("Skipping malformed inline image")
                return None
        data = self.blobs.read(ref)
        if data is None:
            log.info("Image %s is not in local blob storage; skipping", ref)
        return data

    def picture(self, ref: str | None, width) -> None:
        if not ref:
            return
        data = self._image_bytes(ref)
        if data is None:
            return
        png = _to_png(data)
        if png is not None:
            self.doc.add_picture(png, width=width)

    def question(self, question: PreviewQuestion) -> None:
        paragraph = self.doc.add_paragraph()
        paragraph.add_run(f"{question.label} ").bold = True
        if question.type == QuestionType.WRITE_THE_WORD:
            paragraph.add_run(f"{question.text} ________ {question.text_after or ''}".strip())
        elif question.type == QuestionType.TRUE_FALSE:
            paragraph.add_run(f"{question.text}  (T / F)")
        else:
            paragraph.add_run(question.text)
        if question.is_example:
            for run in paragraph.runs[1:]:
                run.italic = True

        self.picture(question.image_url, QUESTION_IMAGE_WIDTH)
        for option in question.options:
            line = f"{option.label}. {option.description}".rstrip()
            self.doc.add_paragraph(line)
            self.picture(option.image_url, OPTION_IMAGE_WIDTH)
        for index, sub in enumerate(question.sub_questions, start=1):
            self.picture(sub.image_url, OPTION_IMAGE_WIDTH)
            self.doc.add_paragraph(f"{index}) {sub.text}")
        if question.disordered_words:
            self.doc.add_paragraph(question.disordered_words)
            self.doc.add_paragraph("_" * 40)

    def part(self, part: PreviewPart) -> None:
        self.doc.add_heading(part.title or "Part", level=2)
        if part.passage:
            for line in part.passage.splitlines():
                if line.strip():
                    self.doc.add_paragraph(line.strip())
        for question in part.questions:
            self.question(question)


def export_test_docx(test: Test, blobs: BlobStorage) -> bytes:
    """Render `test` as a .docx file and return its bytes."""
    preview = build_preview(test)
    writer = _DocxWriter(blobs)
    doc = writer.doc

    doc.add_heading(preview.title or "Untitled test", level=0)
    details = []
    if preview.time_limit:
        details.append(f"Time: {preview.time_limit} minutes")
    details.append(f"Questions: {preview.stats.total_questions}")
    details.append(f"Total score: {_format_score(preview.stats.total_score)}")
    doc.add_paragraph(" | ".join(details))

    for section in preview.sections:
        if not section.parts:
            continue
        doc.add_heading(section.title.upper(), level=1)
        for part in section.parts:
            writer.part(part)

    doc.add_paragraph(END_MARKER)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
