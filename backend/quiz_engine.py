"""
Quiz state for a note: folds analysis and grading results into note.analysis

All functions are pure: they take a Note and return a new Note.
"""

from typing import Dict, List

from backend.errors import EmptyContentError, NothingToGradeError
from backend.models import (
    AIAnalysis, AnalysisResponse, Evaluation, GradingRequestItem, Note,
    QuizItem, new_id,
)


def require_content(note: Note):
    """Raise EmptyContentError for a blank note; checked before calling the provider"""
    if not note.has_content:
        raise EmptyContentError("Please add some content to the note first.")


def apply_analysis(note: Note, result: AnalysisResponse) -> Note:
    """Replace the note's summary and questions with a fresh analysis.

    Earlier questions, answers and grades are discarded.
    """
    require_content(note)
    questions = [QuizItem(id=new_id(), question=q, user_answer="") for q in result.questions]
    analysis = AIAnalysis(summary=list(result.summary), questions=questions)
    return note.touched(analysis=analysis)


def set_answer(note: Note, question_id: str, answer: str) -> Note:
    """Record an answer and reset that question to ungraded"""
    if note.analysis is None:
        return note
    if not any(q.id == question_id for q in note.analysis.questions):
        return note

    questions = [
        q.with_answer(answer) if q.id == question_id else q
        for q in note.analysis.questions
    ]
    return note.touched(analysis=note.analysis.model_copy(update={"questions": questions}))


def submit_for_grading(note: Note) -> List[QuizItem]:
    """Questions with a non-blank answer; NothingToGradeError if there are none"""
    items = [q for q in note.analysis.questions if q.is_answered] if note.analysis else []
    if not items:
        raise NothingToGradeError("Please answer at least one question before checking.")
    return items


def grading_reference(note: Note) -> str:
    """Answers are graded against the summary the student studied, not the raw note"""
    if note.analysis is None:
        return ""
    return "\n".join(note.analysis.summary)


def grading_request(items: List[QuizItem]) -> List[GradingRequestItem]:
    return [
        GradingRequestItem(id=q.id, question=q.question, answer_text=q.user_answer)
        for q in items
    ]


def apply_evaluation(note: Note, evaluations: List[Evaluation]) -> Note:
    """Set is_correct and feedback on every question named in evaluations.

    Questions without an evaluation are left as they are.
    """
    if note.analysis is None or not evaluations:
        return note

    by_id: Dict[str, Evaluation] = {e.question_id: e for e in evaluations}
    questions = []
    for q in note.analysis.questions:
        evaluation = by_id.get(q.id)
        if evaluation is not None:
            q = q.with_grade(evaluation.is_correct, evaluation.feedback)
        questions.append(q)

    return note.touched(analysis=note.analysis.model_copy(update={"questions": questions}))
