"""
Note collection for the active user

The whole collection is written back as one blob after every change.
Order is newest-created first; operations never reorder untouched notes.
"""

import json
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError

from backend.errors import CorruptStoreError
from backend.migrate_notes import migrate_notes, needs_question_migration
from backend.models import Note
from utils.config import notes_key

logger = logging.getLogger(__name__)


class NoteStore:
    """Authoritative in-memory list of notes for one user"""

    def __init__(self, blob_store):
        self.blob_store = blob_store
        self.user_id: Optional[str] = None
        self.notes: List[Note] = []
        self.selected_note_id: Optional[str] = None
        # Set when the last load() had to discard an unreadable collection
        self.last_load_error: Optional[CorruptStoreError] = None

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def read_notes(self, user_id: str) -> List[Note]:
        """Read and migrate the stored collection; raises CorruptStoreError"""
        notes, _ = self._read_collection(user_id)
        return notes

    def _read_collection(self, user_id: str) -> Tuple[List[Note], bool]:
        """Stored notes, plus whether any of them needed migrating"""
        raw = self.blob_store.get(notes_key(user_id))
        if raw is None:
            return [], False

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptStoreError(notes_key(user_id), str(e)) from e

        if not isinstance(data, list) or not all(isinstance(n, dict) for n in data):
            raise CorruptStoreError(notes_key(user_id), "expected a list of note objects")

        migrated = any(needs_question_migration(n) for n in data)
        try:
            return [Note.model_validate(n) for n in migrate_notes(data)], migrated
        except ValidationError as e:
            raise CorruptStoreError(notes_key(user_id), str(e)) from e

    def load(self, user_id: str) -> List[Note]:
        """Load a user's notes. An unreadable collection loads as empty."""
        self.user_id = user_id
        self.last_load_error = None
        migrated = False
        try:
            self.notes, migrated = self._read_collection(user_id)
        except CorruptStoreError as e:
            logger.warning(f"Discarding unreadable notes for user {user_id}: {e.reason}")
            self.last_load_error = e
            self.notes = []

        # Migrated question ids must survive the next load
        if migrated:
            self.persist()

        self.selected_note_id = self.notes[0].id if self.notes else None
        logger.info(f"Loaded {len(self.notes)} notes for user {user_id}")
        return list(self.notes)

    def persist(self):
        """Overwrite the stored collection with the in-memory one"""
        user_id = self._require_user()
        payload = json.dumps([note.to_json_dict() for note in self.notes])
        self.blob_store.set(notes_key(user_id), payload.encode("utf-8"))

    def clear(self):
        """Drop the in-memory collection; stored data is kept"""
        self.user_id = None
        self.notes = []
        self.selected_note_id = None
        self.last_load_error = None

    def _require_user(self) -> str:
        if self.user_id is None:
            raise RuntimeError("No user's notes are loaded")
        return self.user_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, note_id: str) -> Optional[Note]:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    @property
    def selected_note(self) -> Optional[Note]:
        if self.selected_note_id is None:
            return None
        return self.get(self.selected_note_id)

    def select(self, note_id: Optional[str]):
        if note_id is not None and self.get(note_id) is None:
            raise KeyError(f"Unknown note: {note_id}")
        self.selected_note_id = note_id

    def search(self, term: str) -> List[Note]:
        """Notes whose title or content contains term, in collection order"""
        if not term.strip():
            return list(self.notes)
        return [note for note in self.notes if note.matches(term)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self) -> Note:
        """Create an empty note at the front of the list and select it"""
        self._require_user()
        note = Note.create()
        self.notes = [note] + self.notes
        self.selected_note_id = note.id
        self.persist()
        return note

    def update(self, note: Note):
        """Replace the stored note with the same id; unknown ids are ignored"""
        self._require_user()
        if self.get(note.id) is None:
            logger.debug(f"update() ignored for unknown note {note.id}")
            return
        self.notes = [note if n.id == note.id else n for n in self.notes]
        self.persist()

    def remove(self, note_id: str):
        """Delete a note; a deleted selection moves to the first remaining note"""
        self._require_user()
        self.notes = [n for n in self.notes if n.id != note_id]
        if self.selected_note_id == note_id:
            self.selected_note_id = self.notes[0].id if self.notes else None
        self.persist()

    def edit_title(self, note_id: str, title: str) -> Optional[Note]:
        note = self.get(note_id)
        if note is None:
            return None
        updated = note.with_title(title)
        self.update(updated)
        return updated

    def edit_content(self, note_id: str, content: str) -> Optional[Note]:
        note = self.get(note_id)
        if note is None:
            return None
        updated = note.with_content(content)
        self.update(updated)
        return updated
