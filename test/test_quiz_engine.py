# Unit tests for quiz state merging
import unittest

from backend import quiz_engine
from backend.errors import EmptyContentError, NothingToGradeError
from backend.models import AIAnalysis, AnalysisResponse, Evaluation, Note, QuizItem


def note_with_questions(*items, summary=("Point one.", "Point two.")):
    note = Note.create().with_content("Photosynthesis converts light to energy.")
    return note.touched(analysis=AIAnalysis(summary=list(summary), questions=list(items)))


class TestApplyAnalysis(unittest.TestCase):
    def test_photosynthesis_scenario(self):
        note = Note.create().with_content("Photosynthesis converts light to energy.")
        result = AnalysisResponse(
            summary=["Plants use light to make food."],
            questions=["What converts light to energy?"],
        )

        updated = quiz_engine.apply_analysis(note, result)

        self.assertEqual(updated.analysis.summary, ["Plants use light to make food."])
        self.assertEqual(len(updated.analysis.questions), 1)
        item = updated.analysis.questions[0]
        self.assertEqual(item.question, "What converts light to energy?")
        self.assertEqual(item.user_answer, "")
        self.assertIsNone(item.is_correct)
        self.assertIsNone(item.feedback)
        self.assertIsNone(note.analysis)

    def test_blank_content_is_rejected(self):
        note = Note.create().with_content("   \n")
        with self.assertRaises(EmptyContentError):
            quiz_engine.apply_analysis(note, AnalysisResponse(summary=[], questions=[]))

    def test_regenerating_discards_previous_questions_and_grades(self):
        old = QuizItem(id="old", question="Old?", user_answer="A", is_correct=True, feedback="Yes")
        note = note_with_questions(old)

        updated = quiz_engine.apply_analysis(
            note, AnalysisResponse(summary=["New."], questions=["New one?", "New two?"]))

        questions = updated.analysis.questions
        self.assertEqual([q.question for q in questions], ["New one?", "New two?"])
        self.assertNotIn("old", [q.id for q in questions])
        self.assertTrue(all(q.user_answer == "" and not q.is_graded for q in questions))
        self.assertNotEqual(questions[0].id, questions[1].id)


class TestSetAnswer(unittest.TestCase):
    def test_answer_clears_grade(self):
        graded = QuizItem(id="q1", question="Q?", user_answer="old", is_correct=True, feedback="Good")
        note = note_with_questions(graded)

        updated = quiz_engine.set_answer(note, "q1", "new")

        item = updated.analysis.questions[0]
        self.assertEqual(item.user_answer, "new")
        self.assertIsNone(item.is_correct)
        self.assertIsNone(item.feedback)

    def test_same_text_still_clears_grade(self):
        graded = QuizItem(id="q1", question="Q?", user_answer="same", is_correct=False, feedback="No")
        updated = quiz_engine.set_answer(note_with_questions(graded), "q1", "same")
        self.assertFalse(updated.analysis.questions[0].is_graded)

    def test_other_questions_keep_their_grades(self):
        q1 = QuizItem(id="q1", question="Q1?", user_answer="a")
        q2 = QuizItem(id="q2", question="Q2?", user_answer="b", is_correct=True, feedback="Yes")
        updated = quiz_engine.set_answer(note_with_questions(q1, q2), "q1", "changed")
        self.assertEqual(updated.analysis.questions[1], q2)

    def test_unknown_question_returns_same_note(self):
        note = note_with_questions(QuizItem(id="q1", question="Q?"))
        self.assertIs(quiz_engine.set_answer(note, "nope", "x"), note)

    def test_note_without_analysis(self):
        note = Note.create()
        self.assertIs(quiz_engine.set_answer(note, "q1", "x"), note)


class TestGrading(unittest.TestCase):
    def test_only_answered_items_are_submitted(self):
        note = note_with_questions(
            QuizItem(id="q1", question="Q1?", user_answer="an answer"),
            QuizItem(id="q2", question="Q2?", user_answer="   "),
            QuizItem(id="q3", question="Q3?", user_answer=""),
        )
        self.assertEqual([q.id for q in quiz_engine.submit_for_grading(note)], ["q1"])

    def test_nothing_to_grade(self):
        with self.assertRaises(NothingToGradeError):
            quiz_engine.submit_for_grading(note_with_questions(QuizItem(id="q1", question="Q?")))
        with self.assertRaises(NothingToGradeError):
            quiz_engine.submit_for_grading(Note.create())

    def test_reference_is_the_summary(self):
        note = note_with_questions(summary=("First.", "Second."))
        self.assertEqual(quiz_engine.grading_reference(note), "First.\nSecond.")

    def test_grading_request(self):
        items = [QuizItem(id="q1", question="Q?", user_answer="A")]
        request = quiz_engine.grading_request(items)
        self.assertEqual((request[0].id, request[0].question, request[0].answer_text), ("q1", "Q?", "A"))

    def test_apply_evaluation_sets_both_fields_for_matched_items_only(self):
        untouched = QuizItem(id="q2", question="Q2?", user_answer="")
        previously_graded = QuizItem(id="q3", question="Q3?", user_answer="c", is_correct=False, feedback="Hmm")
        note = note_with_questions(
            QuizItem(id="q1", question="Q1?", user_answer="a"), untouched, previously_graded)

        updated = quiz_engine.apply_evaluation(note, [
            Evaluation(question_id="q1", is_correct=True, feedback="Spot on!"),
            Evaluation(question_id="ghost", is_correct=False, feedback="?"),
        ])

        q1, q2, q3 = updated.analysis.questions
        self.assertTrue(q1.is_correct)
        self.assertEqual(q1.feedback, "Spot on!")
        self.assertEqual(q1.user_answer, "a")
        self.assertEqual(q2, untouched)
        self.assertEqual(q3, previously_graded)

    def test_apply_empty_evaluation(self):
        note = note_with_questions(QuizItem(id="q1", question="Q?"))
        self.assertIs(quiz_engine.apply_evaluation(note, []), note)


if __name__ == "__main__":
    unittest.main()
