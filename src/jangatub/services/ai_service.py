"""Quiz generation through the Groq chat completions API."""
import json
import logging
import re
from typing import Any, Optional

import groq
from pydantic import BaseModel

from src.jangatub.core.config import settings
from src.jangatub.core.errors import ServiceUnavailableError, UpstreamServiceError
from src.jangatub.schemas import GeneratedQuestion, GeneratedQuiz

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are "Jangatub AI", an experienced teacher in the Senegalese school system \
who prepares students for the BFEM and the BAC.
- Always answer in French, clearly and step by step.
- Use concrete examples from the Senegalese curriculum.
- Never knowingly give a wrong answer."""

JSON_ONLY = "IMPORTANT: reply ONLY with a valid JSON object, with no text before or after it."

PLACEHOLDER_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]
MISSING_QUESTION = "Question non disponible"
MISSING_EXPLANATION = "Pas d'explication disponible."

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class DocumentContext(BaseModel):
    """What the model is told about the source document."""
    title: str
    year: int
    type: str
    level: str
    subject: str

    @classmethod
    def from_document(cls, document) -> "DocumentContext":
        return cls(
            title=document.title,
            year=document.year,
            type=document.type.value,
            level=document.level.name,
            subject=document.subject.name,
        )

    def describe(self) -> str:
        return f'Document: "{self.title}" - {self.subject}, {self.level}, {self.year}'


class QuizFormatError(ValueError):
    """The model reply does not contain a usable quiz."""


def extract_json_object(reply: str) -> dict[str, Any]:
    match = _JSON_OBJECT.search(reply)
    if not match:
        raise QuizFormatError("No JSON object in model reply")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise QuizFormatError(f"Malformed JSON in model reply: {e}")
    if not isinstance(parsed, dict):
        raise QuizFormatError("Model reply is not a JSON object")
    return parsed


def normalize_question(raw: Any, *, with_points: bool = False) -> GeneratedQuestion:
    """Coerce one model-produced question into four options and a 0-3 answer index."""
    raw = raw if isinstance(raw, dict) else {}
    options = raw.get("options")
    if not (isinstance(options, list) and len(options) == 4):
        options = PLACEHOLDER_OPTIONS
    answer = raw.get("correctAnswer")
    if isinstance(answer, bool) or not isinstance(answer, int) or not 0 <= answer <= 3:
        answer = 0
    points = None
    if with_points:
        points = raw.get("points")
        if isinstance(points, bool) or not isinstance(points, int) or not 1 <= points <= 3:
            points = 1
    return GeneratedQuestion(
        question=str(raw.get("question") or MISSING_QUESTION),
        options=[str(option) for option in options],
        correct_answer=answer,
        explanation=str(raw.get("explanation") or MISSING_EXPLANATION),
        points=points,
    )


def parse_quiz(reply: str, *, with_points: bool = False) -> dict[str, Any]:
    parsed = extract_json_object(reply)
    questions = parsed.get("questions")
    if not parsed.get("title") or not isinstance(questions, list) or not questions:
        raise QuizFormatError("Quiz structure is invalid")
    parsed["questions"] = [normalize_question(q, with_points=with_points) for q in questions]
    return parsed


def _content_block(document_content: Optional[str]) -> str:
    if not document_content:
        return ""
    return (
        "\n\nFull text of the exam paper (extracted from the PDF):\n"
        f"---BEGIN DOCUMENT---\n{document_content}\n---END DOCUMENT---"
    )


def _grounding_rules(doc: DocumentContext, document_content: Optional[str]) -> str:
    if document_content:
        return (
            "CRITICAL RULES:\n"
            "- Every question MUST come directly from the document text above.\n"
            "- Reuse the exercises, data and exact statements of the document.\n"
            "- Ask about the calculations, formulas and reasoning the paper requires.\n"
            "- Never ask general questions unrelated to this specific document."
        )
    return f"Base the questions on the usual topics of {doc.subject} at {doc.level} level for the {doc.year} session."


class GroqClient:
    """Thin wrapper over the async Groq SDK returning the first choice text."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.GROQ_API_KEY
        self.model = settings.GROQ_MODEL
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self._client: Optional[groq.AsyncGroq] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> groq.AsyncGroq:
        if self._client is None:
            self._client = groq.AsyncGroq(api_key=self.api_key, timeout=self.timeout, max_retries=1)
        return self._client

    async def chat(self, messages: list[dict[str, str]], *, max_tokens: int = 2000, temperature: float = 0.7) -> str:
        """Send a chat completion request and return the first choice's content."""
        if not self.api_key:
            raise ServiceUnavailableError("AI is not configured. Set GROQ_API_KEY.")
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except groq.APIStatusError as e:
            logger.error(f"Groq error {e.status_code}: {e.message}")
            raise UpstreamServiceError("The AI service failed. Please retry.")
        except groq.APIError as e:
            logger.error(f"Groq request failed: {e}")
            raise UpstreamServiceError("The AI service failed. Please retry.")

        if not completion.choices:
            logger.error("Groq returned no choices")
            raise UpstreamServiceError("The AI service failed. Please retry.")
        return completion.choices[0].message.content or ""


class QuizGenerator:
    def __init__(self, client: GroqClient):
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client.configured

    def _fallback_quiz(self, doc: DocumentContext) -> GeneratedQuiz:
        return GeneratedQuiz(
            title=f"Quiz - {doc.subject} {doc.level} {doc.year}",
            questions=[GeneratedQuestion(
                question=f"Quel est le thème principal du sujet de {doc.subject} du {doc.level} {doc.year} ?",
                options=[
                    "Les notions fondamentales du programme",
                    "Des notions avancées hors programme",
                    "Uniquement de la pratique",
                    "Aucun thème précis",
                ],
                correct_answer=0,
                explanation=f"Le sujet de {doc.subject} du {doc.level} {doc.year} porte sur les notions fondamentales du programme.",
            )],
        )

    async def generate_quiz(
        self, doc: DocumentContext, number_of_questions: int = 5, document_content: Optional[str] = None
    ) -> GeneratedQuiz:
        """Practice quiz for a student. An unparseable reply degrades to a one-question quiz."""
        messages = [
            {"role": "system", "content": f"{SYSTEM_PROMPT}\n\n{JSON_ONLY}"},
            {"role": "user", "content": f"""{doc.describe()}{_content_block(document_content)}

Write a quiz of {number_of_questions} multiple choice questions.

{_grounding_rules(doc, document_content)}

Each question must suit the {doc.level} level in Senegal, have exactly 4 options with a single \
correct one (index 0 to 3) and include a detailed explanation of the correct answer.

Reply ONLY with this JSON format:
{{
  "title": "Quiz - {doc.subject} {doc.level} {doc.year}",
  "questions": [
    {{"question": "...", "options": ["A", "B", "C", "D"], "correctAnswer": 0, "explanation": "..."}}
  ]
}}"""},
        ]
        reply = await self.client.chat(messages, max_tokens=4000, temperature=0.5)
        try:
            parsed = parse_quiz(reply)
        except QuizFormatError as e:
            logger.error(f"Could not parse generated quiz for {doc.title}: {e}")
            return self._fallback_quiz(doc)
        return GeneratedQuiz(title=str(parsed["title"]), questions=parsed["questions"])

    async def generate_admin_quiz(
        self, doc: DocumentContext, number_of_questions: int = 10, document_content: Optional[str] = None
    ) -> GeneratedQuiz:
        """Graded quiz with points and a duration, meant to be stored."""
        messages = [
            {"role": "system", "content": (
                f"{SYSTEM_PROMPT}\n\n{JSON_ONLY}\n"
                "This quiz is used for certification: it must be rigorous and cover the whole paper."
            )},
            {"role": "user", "content": f"""{doc.describe()}{_content_block(document_content)}

Write an official quiz of {number_of_questions} multiple choice questions.

{_grounding_rules(doc, document_content)}
- Mix difficulties: 30% easy, 40% medium, 30% hard.

Each question must have exactly 4 options with a single correct one (index 0 to 3), a detailed \
explanation and a number of points (1 easy, 2 medium, 3 hard). Choose a duration in minutes \
(2 per easy question, 3 per medium, 4 per hard).

Reply ONLY with this JSON format:
{{
  "title": "{doc.subject} - {doc.level} {doc.year}",
  "description": "...",
  "duration": 30,
  "questions": [
    {{"question": "...", "options": ["A", "B", "C", "D"], "correctAnswer": 0, "explanation": "...", "points": 1}}
  ]
}}"""},
        ]
        reply = await self.client.chat(messages, max_tokens=6000, temperature=0.4)
        try:
            parsed = parse_quiz(reply, with_points=True)
        except QuizFormatError as e:
            logger.error(f"Could not parse admin quiz for {doc.title}: {e}")
            raise UpstreamServiceError("The AI did not return a valid quiz. Please retry.")

        duration = parsed.get("duration")
        if isinstance(duration, bool) or not isinstance(duration, int) or not 5 <= duration <= 180:
            duration = 30
        return GeneratedQuiz(
            title=str(parsed["title"])[:200],
            description=str(parsed.get("description") or f"Quiz based on {doc.title}"),
            duration=duration,
            questions=parsed["questions"],
        )


def get_quiz_generator() -> QuizGenerator:
    return QuizGenerator(GroqClient())
