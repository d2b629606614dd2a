#!/usr/bin/env python3
"""
Tests for the AI provider wrappers, with the SDK clients mocked out
"""

import json
import unittest
from unittest.mock import Mock, patch

from backend.analysis_client import AnalysisClient, strip_data_url
from backend.errors import (
    AnalysisFailedError, ChatFailedError, EvaluationFailedError, ExtractionFailedError,
)
from backend.models import ChatTurn, GradingRequestItem


def completion(content):
    """Mock chat completion response carrying one message"""
    response = Mock()
    response.choices = [Mock()]
    response.choices[0].message.content = content
    response.usage = Mock(total_tokens=42)
    return response


class TestAnalysisClient(unittest.TestCase):
    def setUp(self):
        self.openai = Mock()
        self.grader = Mock()
        self.client = AnalysisClient(provider="openai", client=self.openai, grader_llm=self.grader)

    def sent_params(self):
        return self.openai.chat.completions.create.call_args.kwargs

    def test_strip_data_url(self):
        self.assertEqual(strip_data_url("data:image/png;base64,QUJD"), "QUJD")
        self.assertEqual(strip_data_url("QUJD"), "QUJD")

    def test_extract_text_sends_image(self):
        self.openai.chat.completions.create.return_value = completion("  Hello from the board \n")

        text = self.client.extract_text("data:image/png;base64,QUJD", "image/png")

        self.assertEqual(text, "Hello from the board")
        parts = self.sent_params()["messages"][0]["content"]
        self.assertEqual(parts[0]["image_url"]["url"], "data:image/png;base64,QUJD")
        self.assertEqual(parts[1]["type"], "text")

    def test_extract_text_failure(self):
        self.openai.chat.completions.create.side_effect = RuntimeError("boom")
        with self.assertRaises(ExtractionFailedError):
            self.client.extract_text("QUJD", "image/jpeg")

    def test_analyze_parses_fenced_json(self):
        payload = {"summary": ["Plants use light to make food."], "questions": ["What converts light?"]}
        self.openai.chat.completions.create.return_value = completion(f"```json\n{json.dumps(payload)}\n```")

        result = self.client.analyze("Photosynthesis converts light to energy.")

        self.assertEqual(result.summary, payload["summary"])
        self.assertEqual(result.questions, payload["questions"])
        self.assertIn("Photosynthesis converts light to energy.", self.sent_params()["messages"][0]["content"])
        self.assertEqual(self.sent_params()["response_format"], {"type": "json_object"})

    def test_analyze_malformed_reply(self):
        for reply in ["not json", "", '{"summary": ["only summary"]}', '{"summary": "x", "questions": []}']:
            self.openai.chat.completions.create.return_value = completion(reply)
            with self.assertRaises(AnalysisFailedError):
                self.client.analyze("content")

    def test_analyze_without_choices(self):
        response = completion("{}")
        response.choices = []
        self.openai.chat.completions.create.return_value = response
        with self.assertRaises(AnalysisFailedError):
            self.client.analyze("content")

    def test_evaluate_without_items_makes_no_call(self):
        self.assertEqual(self.client.evaluate("reference", []), [])
        self.grader.invoke.assert_not_called()

    def test_evaluate(self):
        self.grader.invoke.return_value = Mock(content=json.dumps({"evaluations": [
            {"questionId": "q1", "isCorrect": True, "feedback": "Spot on!"},
        ]}))
        items = [GradingRequestItem(id="q1", question="Q?", answer_text="A")]

        evaluations = self.client.evaluate("Plants use light.", items)

        self.assertEqual(len(evaluations), 1)
        self.assertEqual(evaluations[0].question_id, "q1")
        self.assertTrue(evaluations[0].is_correct)
        system, human = self.grader.invoke.call_args.args[0]
        self.assertIn("Plants use light.", system[1])
        self.assertIn('"questionId": "q1"', human[1])

    def test_evaluate_failure(self):
        self.grader.invoke.return_value = Mock(content='{"evaluations": [{"questionId": "q1"}]}')
        items = [GradingRequestItem(id="q1", question="Q?", answer_text="A")]
        with self.assertRaises(EvaluationFailedError):
            self.client.evaluate("ref", items)

    def test_chat_builds_conversation(self):
        self.openai.chat.completions.create.return_value = completion(json.dumps({
            "text": "Here is an example.",
            "attachment": {"type": "code", "title": "Loop", "content": "for x in y: pass", "language": "python"},
        }))
        turns = [ChatTurn(role="user", text="Hi"), ChatTurn(role="model", text="Hello!")]

        reply = self.client.chat("Note body", turns, "Show me a loop")

        self.assertEqual(reply.text, "Here is an example.")
        self.assertEqual(reply.attachment.language, "python")
        messages = self.sent_params()["messages"]
        self.assertEqual(messages[0]["role"], "system")
        self.assertIn("Note body", messages[0]["content"])
        self.assertEqual([(m["role"], m["content"]) for m in messages[1:]], [
            ("user", "Hi"), ("assistant", "Hello!"), ("user", "Show me a loop"),
        ])

    def test_chat_failure(self):
        self.openai.chat.completions.create.side_effect = RuntimeError("network down")
        with self.assertRaises(ChatFailedError):
            self.client.chat("Note", [], "Hi")

    def test_missing_api_key_is_an_analysis_failure(self):
        client = AnalysisClient(provider="openai")
        with patch("utils.providers.load_api_key", return_value=None):
            with self.assertRaises(AnalysisFailedError):
                client.analyze("content")


if __name__ == "__main__":
    unittest.main()
