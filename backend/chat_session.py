"""
Per-note chat transcript

The transcript is append-only. A user message is committed locally before
the provider is asked, and the reply (or an apology if the call failed) is
appended afterwards to whatever the note's transcript is by then.
"""

from typing import List, Optional

from backend.errors import EmptyMessageError
from backend.models import Attachment, ChatMessage, ChatTurn, Note, new_id, now_ms

CHAT_ERROR_MESSAGE = "Sorry, I encountered an error while analyzing your note. Please try again."


def _append(note: Note, message: ChatMessage) -> Note:
    history = list(note.chat_history or [])
    history.append(message)
    return note.touched(chat_history=history)


def append_user_message(note: Note, text: str) -> Note:
    if not text.strip() or not note.has_content:
        raise EmptyMessageError("Type a message, and make sure the note has content.")
    message = ChatMessage(id=new_id(), role="user", content=text, timestamp=now_ms())
    return _append(note, message)


def append_model_reply(note: Note, reply_text: str, attachment: Optional[Attachment] = None) -> Note:
    message = ChatMessage(
        id=new_id(), role="model", content=reply_text,
        attachment=attachment, timestamp=now_ms(),
    )
    return _append(note, message)


def append_error_reply(note: Note) -> Note:
    return append_model_reply(note, CHAT_ERROR_MESSAGE)


def prior_turns(note: Note) -> List[ChatTurn]:
    """Role and text of every message so far; attachments are not replayed"""
    return [ChatTurn(role=m.role, text=m.content) for m in (note.chat_history or [])]
