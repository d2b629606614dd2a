# backend/quiz_grader.py
"""LLM-based grader for a note's quiz.

Grades all submitted answers in one call against the lesson summary and
returns one evaluation per question id. No persistence.
"""

from __future__ import annotations

import json
import logging
from typing import List

from langchain_openai import ChatOpenAI

from backend.models import Evaluation, GradingRequestItem
from backend.tutor_prompts import EVALUATION_SCHEMA, format_evaluation_prompt, parse_json_reply
from utils.config import get_provider_config
from utils.providers import get_model_for_task, get_provider_api_key, resolve_provider

logger = logging.getLogger(__name__)


def get_grader_llm(provider: str = None) -> ChatOpenAI:
    """Create the grader LLM instance for the given (or current) provider."""
    provider = resolve_provider(provider)
    config = get_provider_config(provider)

    llm_kwargs = {
        "model": get_model_for_task("evaluation", provider),
        "temperature": 0,           # deterministic grading
        "api_key": get_provider_api_key(provider),
    }

    # Add base_url if provider requires it (e.g., OpenRouter)
    if config.get("base_url"):
        llm_kwargs["base_url"] = config["base_url"]

    return ChatOpenAI(**llm_kwargs)


def grade_submission(llm: ChatOpenAI, reference: str, items: List[GradingRequestItem]) -> List[Evaluation]:
    """Grade answered questions against the reference text."""
    if not items:
        return []

    submission = json.dumps([
        {"questionId": item.id, "question": item.question, "userAnswer": item.answer_text}
        for item in items
    ])
    logger.info(f"[API CALL] Reason: Quiz grading | Items: {len(items)}")
    resp = llm.invoke([
        ("system", format_evaluation_prompt(reference)),
        ("human", f"Student's Quiz Submission:\n{submission}"),
    ])
    logger.info("[API RETURN] Quiz grading complete")

    data = parse_json_reply(resp.content, EVALUATION_SCHEMA)
    return [Evaluation.model_validate(e) for e in data["evaluations"]]
