# quiz_gateway/quiz_service.py
import logging

from quiz_gateway import normalizer, pdf_processor, prompts
from quiz_gateway.errors import ExtractionError
from quiz_gateway.llm_client import GeminiClient
from quiz_gateway.schemas import HealthCheck, Quiz

logger = logging.getLogger(__name__)

TEXT_FALLBACK_TOPIC = "General"
IMAGE_FALLBACK_TOPIC = "Visual Analysis"


class QuizService:
    """
    Runs the extract -> prompt -> model -> normalize chain for each input mode.
    Holds no per-request state; the client is injected so tests can fake it.
    """

    def __init__(self, client: GeminiClient):
        self.client = client

    async def quiz_from_pdf(self, pdf_bytes: bytes, difficulty: str, question_count: int) -> Quiz:
        logger.info("Extracting text from PDF (%d bytes)...", len(pdf_bytes))
        text = pdf_processor.extract_text(pdf_bytes)
        if not pdf_processor.is_content_sufficient(text):
            raise ExtractionError(
                "PDF content is too short or invalid. Please upload a PDF with more text content."
            )
        logger.info("Extracted %d characters from PDF", len(text))
        return await self.quiz_from_text(text, difficulty, question_count)

    async def quiz_from_text(self, text: str, difficulty: str, question_count: int) -> Quiz:
        prompt = prompts.build_text_prompt(text, difficulty, question_count)
        raw_reply = await self.client.generate_text(prompt)
        quiz = normalizer.normalize(raw_reply, difficulty, TEXT_FALLBACK_TOPIC)
        logger.info("Generated %d questions from text", len(quiz.questions))
        return quiz

    async def quiz_from_topic(self, topic: str, difficulty: str, question_count: int) -> Quiz:
        logger.info('Generating quiz for topic: "%s"...', topic)
        prompt = prompts.build_topic_prompt(topic, difficulty, question_count)
        raw_reply = await self.client.generate_text(prompt)
        quiz = normalizer.normalize(raw_reply, difficulty, topic)
        logger.info('Generated %d questions for topic "%s"', len(quiz.questions), topic)
        return quiz

    async def quiz_from_image(self, image_bytes: bytes, mime_type: str, difficulty: str, question_count: int) -> Quiz:
        logger.info("Processing image (%d bytes, %s)...", len(image_bytes), mime_type)
        # second call depends on the first, the image itself is only sent once
        description = await self.client.describe_image(image_bytes, mime_type)
        prompt = prompts.build_image_prompt(description, difficulty, question_count)
        raw_reply = await self.client.generate_text(prompt)
        quiz = normalizer.normalize(raw_reply, difficulty, IMAGE_FALLBACK_TOPIC)
        logger.info("Generated %d questions from image", len(quiz.questions))
        return quiz

    async def check_health(self) -> HealthCheck:
        return await self.client.check_health()
