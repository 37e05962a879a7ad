"""Shared test fixtures and helpers for pytest."""

import json
from typing import Any, List, Optional

import pytest
from fastapi.testclient import TestClient

from quiz_gateway.main import create_app
from quiz_gateway.quiz_service import QuizService
from quiz_gateway.schemas import HealthCheck


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages: List[List[str]]) -> bytes:
    """Build a small but well-formed PDF with one Helvetica text line per entry."""
    page_count = len(pages)
    font_id = 3 + 2 * page_count
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        (
            "<< /Type /Pages /Kids ["
            + " ".join(f"{3 + 2 * i} 0 R" for i in range(page_count))
            + f"] /Count {page_count} >>"
        ).encode(),
    ]
    for i, lines in enumerate(pages):
        content_id = 4 + 2 * i
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents {content_id} 0 R "
                f"/Resources << /Font << /F1 {font_id} 0 R >> >> >>"
            ).encode()
        )
        ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
        for line in lines:
            ops.append(f"({_pdf_escape(line)}) Tj T*")
        ops.append("ET")
        stream = "\n".join(ops).encode()
        objects.append(b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream")
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


class FakeModelClient:
    """Stands in for GeminiClient; replays canned replies and records every call."""

    def __init__(self, replies: Optional[List[str]] = None, description: str = "A labelled diagram of the water cycle."):
        self.replies = list(replies or [])
        self.description = description
        self.prompts: List[str] = []
        self.images: List[Any] = []
        self.error: Optional[Exception] = None
        self.health: Any = HealthCheck(ok=True, message="connected")

    @property
    def call_count(self) -> int:
        return len(self.prompts) + len(self.images)

    async def generate_text(self, prompt: str, json_output: bool = True) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)

    async def describe_image(self, image_bytes: bytes, mime_type: str) -> str:
        self.images.append((image_bytes, mime_type))
        if self.error is not None:
            raise self.error
        return self.description

    async def check_health(self) -> HealthCheck:
        if isinstance(self.health, Exception):
            raise self.health
        return self.health


@pytest.fixture
def sample_reply() -> str:
    """A well-formed two-question reply wrapped in a json code fence."""
    payload = {
        "questions": [
            {
                "id": 1,
                "question": "What gas do plants absorb during photosynthesis?",
                "options": ["Oxygen", "Carbon dioxide", "Nitrogen", "Helium"],
                "correctAnswer": 1,
                "explanation": "Plants take in carbon dioxide and release oxygen.",
                "difficulty": "Easy",
                "topic": "Biology",
                "visual_keyword": "Leaf",
            },
            {
                "question": "Where in the cell does photosynthesis happen?",
                "options": ["Nucleus", "Mitochondria", "Chloroplast", "Ribosome"],
                "correctAnswer": 2,
                "explanation": "Chloroplasts contain chlorophyll.",
            },
        ]
    }
    return "```json\n" + json.dumps(payload) + "\n```"


@pytest.fixture
def long_text() -> str:
    """Enough prose to pass the content gate."""
    return (
        "Photosynthesis is the process by which green plants and some other organisms use sunlight "
        "to synthesize foods from carbon dioxide and water. It generally involves the green pigment "
        "chlorophyll and generates oxygen as a byproduct."
    )


@pytest.fixture
def pdf_factory():
    """Expose make_pdf to tests that need custom pages."""
    return make_pdf


@pytest.fixture
def sample_pdf(long_text: str) -> bytes:
    half = len(long_text) // 2
    return make_pdf([[long_text[:half], "Page 1 of 2"], [long_text[half:], "Page 2 of 2"]])


@pytest.fixture
def fake_client(sample_reply: str) -> FakeModelClient:
    return FakeModelClient(replies=[sample_reply])


@pytest.fixture
def service(fake_client: FakeModelClient) -> QuizService:
    return QuizService(fake_client)


@pytest.fixture
def api(service: QuizService) -> TestClient:
    return TestClient(create_app(service=service))
