"""Utility module containing
- Prompt templates for OCR, lesson/quiz generation, grading and the note tutor chat
- JSON-schema definitions for the provider's structured replies
- Helper to parse and validate a JSON reply.
"""

from __future__ import annotations

import json
import re
from typing import Any

import jsonschema

# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

OCR_PROMPT = (
    "Extract all text from this image and format it as a clean text note. "
    "Do not add any introductory or concluding remarks, just the extracted text."
)

ANALYSIS_PROMPT_TEMPLATE = """
You are a passionate, engaging, and highly effective teacher. Your goal is to help your student truly understand the material, not just memorize it.

Input Text:
"{NOTE_CONTENT}"

Your Instructions:

Task 1: The Lesson (Summary)
Write a summary of the input text.
- **Tone**: Warm, conversational, and enthusiastic (like a human tutor speaking).
- **Structure**: Break it down into key concepts.
- **Requirement**: For every key point you make, you MUST provide a concrete, real-world **example** or analogy to help explain it.
- **Format**: A list of strings, where each string is a complete thought/paragraph.

Task 2: The Quiz (Questions)
Create a comprehensive set of study questions.
- **Constraint**: These questions must be answerable **SOLELY** based on the Lesson you wrote in Task 1.
- **Exclusion Rule**: Test the UNDERLYING CONCEPT, not the specific examples or analogies from the Lesson.
- **Quantity**: As many questions as needed to fully test understanding of the Lesson.
- **Style**: Open-ended questions that require thinking, not keyword matching.

Reply with ONLY a JSON object: {{"summary": [<string>, ...], "questions": [<string>, ...]}}
"""

EVALUATION_PROMPT_TEMPLATE = """
You are a helpful and encouraging tutor grading a student's quiz.

REFERENCE MATERIAL (The Lesson):
"{REFERENCE}"

Determine if each of the student's answers is correct based **ONLY** on the REFERENCE MATERIAL above.

- isCorrect: true if the answer demonstrates understanding of the Reference Material.
- feedback: a friendly 1-2 sentence explanation. Praise specifically when correct;
  when incorrect, kindly correct the student using facts from the Reference Material.

Reply with ONLY a JSON object:
{{"evaluations": [{{"questionId": <string>, "isCorrect": <bool>, "feedback": <string>}}, ...]}}
"""

CHAT_PROMPT_TEMPLATE = """
You are a study tutor answering questions about the student's note.

NOTE
────────────────────────────────────────────────
{NOTE_CONTENT}
────────────────────────────────────────────────

RULES
• Ground your answers in the note. If the note does not cover something, say so, then answer briefly.
• Keep replies concise and encouraging.
• When a code sample or a diagram genuinely helps, include it as an attachment:
  - code  : {{"type": "code", "title": <str>, "content": <source>, "language": <str>}}
  - image : {{"type": "image", "title": <str>, "content": <inline SVG markup>}}

Reply with ONLY a JSON object: {{"text": <string>, "attachment": <object, optional>}}
"""

# ---------------------------------------------------------------------------
# JSON-Schema definitions for structured replies
# ---------------------------------------------------------------------------

ANALYSIS_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Analysis",
    "type": "object",
    "properties": {
        "summary": {"type": "array", "items": {"type": "string"}},
        "questions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["summary", "questions"],
}

EVALUATION_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Evaluation",
    "type": "object",
    "properties": {
        "evaluations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "questionId": {"type": "string"},
                    "isCorrect": {"type": "boolean"},
                    "feedback": {"type": "string"},
                },
                "required": ["questionId", "isCorrect", "feedback"],
            },
        }
    },
    "required": ["evaluations"],
}

CHAT_REPLY_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ChatReply",
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "attachment": {
            "type": "object",
            "properties": {
                "type": {"enum": ["code", "image"]},
                "title": {"type": "string"},
                "content": {"type": "string"},
                "language": {"type": "string"},
            },
            "required": ["type", "title", "content"],
        },
    },
    "required": ["text"],
}

# ---------------------------------------------------------------------------
# Prompt-formatting helpers
# ---------------------------------------------------------------------------

def format_analysis_prompt(note_content: str) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(NOTE_CONTENT=note_content)


def format_evaluation_prompt(reference: str) -> str:
    return EVALUATION_PROMPT_TEMPLATE.format(REFERENCE=reference)


def format_chat_prompt(note_content: str) -> str:
    return CHAT_PROMPT_TEMPLATE.format(NOTE_CONTENT=note_content)

# ---------------------------------------------------------------------------
# Reply parsing + validation helper
# ---------------------------------------------------------------------------

FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.S)


def parse_json_reply(text: str | None, schema: dict[str, Any]) -> dict[str, Any]:
    """Parse a JSON reply, tolerating a ```json fence, and validate it.

    Raises
    ------
    ValueError
        Empty reply or malformed JSON.
    jsonschema.ValidationError
        Reply does not match the schema.
    """
    if not text or not text.strip():
        raise ValueError("Empty reply from provider")

    body = text.strip()
    m = FENCE_RE.match(body)
    if m:
        body = m.group(1)

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Reply JSON malformed: {e}") from e

    jsonschema.validate(data, schema)
    return data
