"""
Note migration for SmartNotes
Upgrades notes saved by early releases, where analysis.questions was a plain
list of strings, to the current quiz item shape.

Runs on the raw JSON dicts, before model validation.
"""

import logging
from typing import Any, Dict, List

from backend.models import new_id

logger = logging.getLogger(__name__)


def needs_question_migration(note: Dict[str, Any]) -> bool:
    """True when the note's first quiz question is a bare string"""
    analysis = note.get("analysis")
    if not isinstance(analysis, dict):
        return False
    questions = analysis.get("questions")
    if not isinstance(questions, list) or not questions:
        return False
    return isinstance(questions[0], str)


def migrate_note(note: Dict[str, Any]) -> Dict[str, Any]:
    """Return the note with legacy string questions rewritten as quiz items.

    Already-migrated notes are returned unchanged.
    """
    if not needs_question_migration(note):
        return note

    analysis = note["analysis"]
    legacy_questions = analysis["questions"]
    migrated = dict(note)
    migrated["analysis"] = {
        **analysis,
        "questions": [
            {"id": new_id(), "question": str(q), "userAnswer": ""}
            for q in legacy_questions
        ],
    }
    logger.info(f"Migrated {len(legacy_questions)} legacy questions for note {note.get('id')}")
    return migrated


def migrate_notes(notes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Migrate every note in a loaded collection"""
    return [migrate_note(note) for note in notes]
