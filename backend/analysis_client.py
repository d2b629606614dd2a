"""
AI provider calls for SmartNotes: OCR, lesson/quiz generation, grading and chat.

Stateless request/response wrappers. Every failure, including configuration
problems and malformed replies, is raised as the operation's typed error.
"""

import logging
from typing import List, Optional, Sequence

from openai import OpenAI

from backend.errors import (
    AnalysisFailedError, ChatFailedError, EvaluationFailedError, ExtractionFailedError,
)
from backend.models import AnalysisResponse, ChatReply, ChatTurn, Evaluation, GradingRequestItem
from backend.quiz_grader import get_grader_llm, grade_submission
from backend.tutor_prompts import (
    ANALYSIS_SCHEMA, CHAT_REPLY_SCHEMA, OCR_PROMPT,
    format_analysis_prompt, format_chat_prompt, parse_json_reply,
)
from utils.providers import create_client, get_api_call_params, get_model_for_task, get_token_count

logger = logging.getLogger(__name__)

JSON_RESPONSE = {"type": "json_object"}


def strip_data_url(data: str) -> str:
    """Drop a "data:<mime>;base64," prefix if present"""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


class AnalysisClient:
    """Wraps the provider for the four note operations"""

    def __init__(self, provider: str = None, client: Optional[OpenAI] = None, grader_llm=None):
        self.provider = provider
        self._client = client
        self._grader_llm = grader_llm

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = create_client(self.provider)
        return self._client

    @property
    def grader_llm(self):
        if self._grader_llm is None:
            self._grader_llm = get_grader_llm(self.provider)
        return self._grader_llm

    def _complete(self, reason: str, task: str, messages: list, **kwargs) -> str:
        model = get_model_for_task(task, self.provider)
        params = get_api_call_params(model=model, messages=messages, **kwargs)
        logger.info(f"[API CALL] Reason: {reason} | Model: {model}")
        response = self.client.chat.completions.create(**params)
        logger.info(f"[API RETURN] {reason} complete | Model: {model} | Tokens: {get_token_count(response)}")

        if not response.choices:
            raise ValueError("Invalid response structure: no choices")
        return response.choices[0].message.content or ""

    def extract_text(self, image_base64: str, mime_type: str) -> str:
        """Text found in an image"""
        data_url = f"data:{mime_type};base64,{strip_data_url(image_base64)}"
        try:
            text = self._complete("Image text extraction", "vision", [
                {"role": "user", "content": [
                    {"type": "image_url", "image_url": {"url": data_url}},
                    {"type": "text", "text": OCR_PROMPT},
                ]},
            ])
        except Exception as e:
            logger.error(f"OCR call failed: {type(e).__name__}: {str(e)}")
            raise ExtractionFailedError("Failed to extract text from image.") from e
        return text.strip()

    def analyze(self, note_content: str) -> AnalysisResponse:
        """Summary points and quiz questions for a note"""
        try:
            reply = self._complete("Note analysis", "analysis", [
                {"role": "user", "content": format_analysis_prompt(note_content)},
            ], temperature=0.7, response_format=JSON_RESPONSE)
            return AnalysisResponse.model_validate(parse_json_reply(reply, ANALYSIS_SCHEMA))
        except Exception as e:
            logger.error(f"Analysis call failed: {type(e).__name__}: {str(e)}")
            raise AnalysisFailedError("Failed to generate analysis. Please try again.") from e

    def evaluate(self, reference_text: str, items: Sequence[GradingRequestItem]) -> List[Evaluation]:
        """Grade answers against the reference text; empty input makes no call"""
        if not items:
            return []
        try:
            return grade_submission(self.grader_llm, reference_text, list(items))
        except Exception as e:
            logger.error(f"Evaluation call failed: {type(e).__name__}: {str(e)}")
            raise EvaluationFailedError("Failed to check answers. Please try again.") from e

    def chat(self, note_content: str, prior_turns: Sequence[ChatTurn], new_message: str) -> ChatReply:
        """Tutor reply to new_message, grounded in the note"""
        messages = [{"role": "system", "content": format_chat_prompt(note_content)}]
        for turn in prior_turns:
            messages.append({
                "role": "assistant" if turn.role == "model" else "user",
                "content": turn.text,
            })
        messages.append({"role": "user", "content": new_message})

        try:
            reply = self._complete("Note chat", "chat", messages,
                                   temperature=0.7, response_format=JSON_RESPONSE)
            return ChatReply.model_validate(parse_json_reply(reply, CHAT_REPLY_SCHEMA))
        except Exception as e:
            logger.error(f"Chat call failed: {type(e).__name__}: {str(e)}")
            raise ChatFailedError("Chat request failed") from e
