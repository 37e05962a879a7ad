# quiz_gateway/prompts.py
"""Prompt templates for the three quiz modes.

All builders are pure: the same arguments always render the same string.
"""

MAX_CONTENT_LENGTH = 4000
TRUNCATION_MARKER = "...(truncated)"

DESCRIBE_IMAGE_PROMPT = (
    "Describe this image in detail. Include all visible elements, text, diagrams, "
    "concepts, and any educational content present. Be comprehensive and specific."
)

_JSON_ONLY = (
    "IMPORTANT: Return ONLY a valid JSON object. Do not include any markdown formatting, "
    "code blocks (```json), or explanatory text."
)

_SCHEMA = """The JSON must follow this EXACT structure:
{{
  "questions": [
    {{
      "id": 1,
      "question": "{question_hint}",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "{explanation_hint}",
      "difficulty": "{difficulty}",
      "topic": "{topic_hint}",
      "visual_keyword": "{keyword_hint}"
    }}
  ]
}}"""


def truncate_content(content: str, limit: int = MAX_CONTENT_LENGTH) -> str:
    """Cut content to `limit` characters, appending TRUNCATION_MARKER when anything was dropped."""
    if len(content) <= limit:
        return content
    return f"{content[:limit]} {TRUNCATION_MARKER}"


def _schema(difficulty: str, question_hint: str, explanation_hint: str, topic_hint: str, keyword_hint: str) -> str:
    return _SCHEMA.format(
        difficulty=difficulty,
        question_hint=question_hint,
        explanation_hint=explanation_hint,
        topic_hint=topic_hint,
        keyword_hint=keyword_hint,
    )


def _requirements(lines) -> str:
    return "Requirements:\n" + "\n".join(f"{i}. {line}" for i, line in enumerate(lines, start=1))


def build_text_prompt(content: str, difficulty: str, question_count: int) -> str:
    """Prompt for quizzes generated from extracted document text."""
    schema = _schema(
        difficulty,
        "Clear, specific question text?",
        "Detailed explanation of why this answer is correct",
        "Auto-detected topic from content",
        "A single descriptive keyword or short phrase for image generation "
        "(e.g. 'Solar System', 'Microscope', 'Ancient Rome')",
    )
    requirements = _requirements([
        f"Generate exactly {question_count} questions",
        "Each question MUST have exactly 4 options",
        "correctAnswer is the index (0-3) of the correct option in the options array",
        "Make questions directly relevant to the provided content",
        "Vary question types (factual, conceptual, analytical)",
        "Provide clear, educational explanations",
        "Auto-detect the most appropriate topic from the content",
        f"Ensure questions are appropriate for {difficulty} difficulty level",
        "Make sure the JSON is valid and parseable",
        "Do not include any text outside the JSON object",
    ])
    return f"""You are an expert quiz creator. Generate {question_count} multiple-choice quiz questions based on the following content.

Difficulty Level: {difficulty}

Content to analyze:
{truncate_content(content)}

{_JSON_ONLY}

{schema}

{requirements}

Return ONLY the JSON object, nothing else."""


def build_image_prompt(image_description: str, difficulty: str, question_count: int) -> str:
    """Prompt for quizzes generated from a model-written image description."""
    schema = _schema(
        difficulty,
        "Question about the image content?",
        "Explanation based on image content",
        "Topic derived from image",
        "Short visual description related to this specific question",
    )
    requirements = _requirements([
        f"Generate exactly {question_count} questions",
        "Each question MUST have exactly 4 options",
        "correctAnswer is the index (0-3) of the correct option",
        "Questions should be about what's visible or inferable from the image",
        "Include questions about visual elements, context, and implications",
        "Provide educational explanations",
        f"Ensure questions match {difficulty} difficulty level",
        "Return ONLY valid JSON, no additional text",
    ])
    return f"""You are an expert quiz creator. Based on this image description, generate {question_count} multiple-choice quiz questions.

Image Description:
{truncate_content(image_description)}

Difficulty Level: {difficulty}

{_JSON_ONLY}

{schema}

{requirements}

Return ONLY the JSON object, nothing else."""


def build_topic_prompt(topic: str, difficulty: str, question_count: int) -> str:
    """Prompt for quizzes about a free-text topic, answered from model knowledge."""
    topic = truncate_content(topic)
    schema = _schema(
        difficulty,
        "Clear, specific question text?",
        "Detailed explanation of why this answer is correct",
        topic,
        "A single descriptive keyword or short phrase for image generation "
        "(e.g. 'Guitar', 'Beethoven', 'Jazz Club')",
    )
    requirements = _requirements([
        f"Generate exactly {question_count} questions",
        "Each question MUST have exactly 4 options",
        "correctAnswer is the index (0-3) of the correct option",
        f'Questions should be factually accurate and relevant to "{topic}"',
        "Vary question types (factual, conceptual, analytical)",
        "Provide clear, educational explanations",
        f"Ensure questions are appropriate for {difficulty} difficulty level",
        "Return ONLY valid JSON, no additional text",
        "Do not include any text outside the JSON object",
    ])
    return f"""You are an expert quiz creator. Generate {question_count} multiple-choice quiz questions about "{topic}". Use your internal knowledge to create accurate, engaging, and educational questions.

Difficulty Level: {difficulty}
Topic: {topic}

{_JSON_ONLY}

{schema}

{requirements}

Return ONLY the JSON object, nothing else."""
