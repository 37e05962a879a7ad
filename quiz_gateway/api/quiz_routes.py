# quiz_gateway/api/quiz_routes.py
from datetime import datetime, timezone
import logging
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from quiz_gateway.config import (
    ALLOWED_MIME_TYPES,
    DEFAULT_DIFFICULTY,
    DEFAULT_QUESTION_COUNT,
    IMAGE_MIME_TYPES,
    MAX_UPLOAD_BYTES,
)
from quiz_gateway.errors import InputValidationError
from quiz_gateway.quiz_service import QuizService
from quiz_gateway.schemas import HealthStatus, Quiz, QuizMetadata, QuizResponse, TopicRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_quiz_service(request: Request) -> QuizService:
    return request.app.state.quiz_service


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def read_upload(file: Optional[UploadFile], accepted: Sequence[str], kind: str) -> bytes:
    """Check an upload's type and size before anything else touches it."""
    if file is None:
        raise InputValidationError("Attach the document in the 'file' form field.", error="No file uploaded")

    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_MIME_TYPES:
        raise InputValidationError(
            "Invalid file type. Only PDF, JPG, PNG, and WebP are allowed.", error="Invalid file type"
        )
    if content_type not in accepted:
        raise InputValidationError(f"This endpoint only accepts {kind} files.", error="Invalid file type")

    # read one byte past the limit so oversize uploads are detected without buffering them whole
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise InputValidationError("Maximum file size is 10MB", error="File too large")
    return data


def quiz_response(quiz: Quiz, metadata: QuizMetadata) -> dict:
    response = QuizResponse(quiz=quiz, metadata=metadata)
    # questions keep imageUrl: null, metadata drops whichever of filename/topic is unused
    unused = {name for name, value in metadata if value is None}
    return response.model_dump(exclude={"metadata": unused})


@router.get("/health")
async def health(service: QuizService = Depends(get_quiz_service)):
    try:
        check = await service.check_health()
    except Exception as e:
        logger.exception("Health check failed")
        return JSONResponse(status_code=500, content={"status": "error", "message": str(e)})

    return HealthStatus(
        status="ok",
        geminiApi="connected" if check.ok else "error",
        geminiMessage=check.message,
        timestamp=utc_timestamp(),
    ).model_dump()


@router.post("/upload/pdf")
async def upload_pdf(
    file: Optional[UploadFile] = File(None),
    difficulty: str = Form(DEFAULT_DIFFICULTY),
    questionCount: int = Form(DEFAULT_QUESTION_COUNT, ge=1),
    service: QuizService = Depends(get_quiz_service),
):
    data = await read_upload(file, ("application/pdf",), "PDF")
    quiz = await service.quiz_from_pdf(data, difficulty, questionCount)

    return quiz_response(
        quiz,
        QuizMetadata(
            source="pdf",
            filename=file.filename,
            generatedAt=utc_timestamp(),
            difficulty=difficulty,
            questionCount=len(quiz.questions),
        ),
    )


@router.post("/generate/topic")
async def generate_topic(payload: TopicRequest, service: QuizService = Depends(get_quiz_service)):
    # blank check only; the topic is passed on and echoed as submitted
    if not (payload.topic or "").strip():
        raise InputValidationError("Provide a non-empty 'topic' field.", error="Topic is required")

    quiz = await service.quiz_from_topic(payload.topic, payload.difficulty, payload.questionCount)

    return quiz_response(
        quiz,
        QuizMetadata(
            source="topic",
            topic=payload.topic,
            generatedAt=utc_timestamp(),
            difficulty=payload.difficulty,
            questionCount=len(quiz.questions),
        ),
    )


@router.post("/upload/image")
async def upload_image(
    file: Optional[UploadFile] = File(None),
    difficulty: str = Form(DEFAULT_DIFFICULTY),
    questionCount: int = Form(DEFAULT_QUESTION_COUNT, ge=1),
    service: QuizService = Depends(get_quiz_service),
):
    data = await read_upload(file, IMAGE_MIME_TYPES, "JPEG, PNG or WebP image")
    quiz = await service.quiz_from_image(data, file.content_type.lower(), difficulty, questionCount)

    return quiz_response(
        quiz,
        QuizMetadata(
            source="image",
            filename=file.filename,
            generatedAt=utc_timestamp(),
            difficulty=difficulty,
            questionCount=len(quiz.questions),
        ),
    )
