"""
Jobs module for SmartNotes
End-to-end flows that call the AI provider and fold the result into a note.

Each flow looks the note up by id again after the provider returns and
applies the result to that current value, so edits made while the call was
running are kept. Overlapping calls of the same kind on one note are not
fenced: the last result to arrive wins.
"""

import logging
from typing import Optional

from backend import chat_session, quiz_engine
from backend.analysis_client import AnalysisClient
from backend.errors import ExtractionFailedError
from backend.models import Note
from backend.note_store import NoteStore

logger = logging.getLogger(__name__)

OCR_SEPARATOR = "\n\n--- Extracted from Image ---\n"


def _require_note(store: NoteStore, note_id: str) -> Note:
    note = store.get(note_id)
    if note is None:
        raise KeyError(f"Unknown note: {note_id}")
    return note


def _commit(store: NoteStore, note_id: str, change) -> Optional[Note]:
    """Apply change() to the note's current value and persist it.

    Returns None when the note was deleted while the provider call ran.
    """
    current = store.get(note_id)
    if current is None:
        logger.warning(f"Note {note_id} was deleted before its result arrived; dropping result")
        return None
    updated = change(current)
    store.update(updated)
    return updated


def extract_text_into_note(store: NoteStore, note_id: str, image_base64: str,
                           mime_type: str, client: AnalysisClient) -> Optional[Note]:
    """OCR an image and append the text to the note's content"""
    _require_note(store, note_id)
    if not mime_type.startswith("image/"):
        raise ExtractionFailedError("Please upload a valid image file.")

    extracted = client.extract_text(image_base64, mime_type)

    def append_text(note: Note) -> Note:
        content = f"{note.content}{OCR_SEPARATOR}{extracted}" if note.content else extracted
        return note.with_content(content)

    return _commit(store, note_id, append_text)


def analyze_note(store: NoteStore, note_id: str, client: AnalysisClient) -> Optional[Note]:
    """Generate a fresh summary and quiz for a note, replacing the old one"""
    note = _require_note(store, note_id)
    quiz_engine.require_content(note)

    logger.info(f"Analyzing note {note_id} ({note.word_count} words)")
    result = client.analyze(note.content)
    return _commit(store, note_id, lambda current: quiz_engine.apply_analysis(current, result))


def check_answers(store: NoteStore, note_id: str, client: AnalysisClient) -> Optional[Note]:
    """Grade every answered question of a note"""
    note = _require_note(store, note_id)
    items = quiz_engine.submit_for_grading(note)

    logger.info(f"Grading {len(items)} answers for note {note_id}")
    evaluations = client.evaluate(
        quiz_engine.grading_reference(note),
        quiz_engine.grading_request(items),
    )
    return _commit(store, note_id, lambda current: quiz_engine.apply_evaluation(current, evaluations))


def send_chat_message(store: NoteStore, note_id: str, text: str,
                      client: AnalysisClient) -> Optional[Note]:
    """Append the user's message, ask the tutor, then append its reply.

    Any failure of the chat call appends an apology message instead of raising.
    """
    note = _require_note(store, note_id)
    turns = chat_session.prior_turns(note)

    # Phase 1: commit the user's message before the provider is asked
    store.update(chat_session.append_user_message(note, text))

    # Phase 2
    try:
        reply = client.chat(note.content, turns, text)
    except Exception as e:
        logger.error(f"Chat failed for note {note_id}: {type(e).__name__}: {str(e)}")
        return _commit(store, note_id, chat_session.append_error_reply)

    return _commit(store, note_id,
                   lambda current: chat_session.append_model_reply(current, reply.text, reply.attachment))
