"""
Error taxonomy for SmartNotes

Validation errors are shown to the user and never mutate state.
Provider errors leave the note untouched. Chat failures are turned into
a transcript message by the chat flow instead of being raised further.
"""


class NotesError(Exception):
    """Base class for all SmartNotes errors"""
    pass


class NoteValidationError(NotesError):
    """Input rejected before any state change or provider call"""
    pass


class DuplicateUsernameError(NoteValidationError):
    pass


class InvalidCredentialsError(NoteValidationError):
    pass


class MissingCredentialsError(NoteValidationError):
    pass


class EmptyContentError(NoteValidationError):
    pass


class NothingToGradeError(NoteValidationError):
    pass


class EmptyMessageError(NoteValidationError):
    pass


class CorruptStoreError(NotesError):
    """Persisted data under a blob store key could not be parsed"""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored data under {key} is unreadable: {reason}")
        self.key = key
        self.reason = reason


class ProviderCallError(NotesError):
    """An AI provider request failed"""
    pass


class ExtractionFailedError(ProviderCallError):
    pass


class AnalysisFailedError(ProviderCallError):
    pass


class EvaluationFailedError(ProviderCallError):
    pass


class ChatFailedError(ProviderCallError):
    pass
