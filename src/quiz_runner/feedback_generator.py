"""Feedback Generator: Turns session results into text for the player."""

import logging
import random
import string
from typing import Optional

from .question_bank import topic_label

logger = logging.getLogger(__name__)

CORRECT_TITLE = "Correct ✅"
INCORRECT_TITLE = "Not quite ❌"
NO_QUESTIONS_MESSAGE = "No questions found for this topic."
RETRY_TIP = "Tip: Reset and try another topic to practice more."

REINFORCEMENTS = [
    "Keep it up!",
    "You're doing well!",
    "Nice work!",
    "That's the one!",
]


def option_letter(index: int) -> str:
    """A, B, C, ... for option indices; falls back to the 1-based number past Z."""
    if 0 <= index < len(string.ascii_uppercase):
        return string.ascii_uppercase[index]
    return str(index + 1)


class FeedbackGenerator:
    """Generates feedback text from grading results and session state."""

    def __init__(self, reinforce: bool = True, rng: Optional[random.Random] = None):
        self.reinforce = reinforce
        self._rng = rng or random.Random()

    def generate(self, grade_result, options=None) -> str:
        """Feedback for a graded answer: verdict title, correct option and explanation."""
        if grade_result.is_correct:
            title = CORRECT_TITLE
            if self.reinforce:
                title = f"{title} {self._rng.choice(REINFORCEMENTS)}"
            return f"{title}\n{grade_result.explanation}"

        correct = grade_result.correct_index
        answer_line = ""
        if isinstance(correct, int) and options and 0 <= correct < len(options):
            answer_line = f"The correct answer is {option_letter(correct)}) {options[correct]}.\n"
        return f"{INCORRECT_TITLE}\n{answer_line}{grade_result.explanation}"

    def generate_intro(self, view) -> str:
        """Question header and lettered options for a QuestionView."""
        lines = [
            f"Question {view.position} of {view.total} [{view.display_id} | {view.topic}]",
            view.question,
        ]
        for i, option in enumerate(view.options):
            lines.append(f"  {option_letter(i)}) {option}")
        return "\n".join(lines)

    def generate_start_message(self, start_result) -> str:
        if start_result.is_empty:
            return NO_QUESTIONS_MESSAGE
        return (f"Starting {topic_label(start_result.topic)} with "
                f"{start_result.question_count} question(s). Good luck!")

    def generate_status(self, progress, score: int) -> str:
        position, total = progress
        return f"Progress {position}/{total} | Score {score}"

    def generate_session_summary(self, summary) -> str:
        """End-of-run summary with a remark scaled to the percentage scored."""
        text = f"Finished! Your score is {summary.score}/{summary.total}. "
        pct = summary.percentage
        if pct >= 80:
            text += "Outstanding performance!"
        elif pct >= 60:
            text += "Good work! Keep practicing."
        else:
            text += "Keep studying, you'll improve with practice!"
        return f"{text}\n{RETRY_TIP}"
