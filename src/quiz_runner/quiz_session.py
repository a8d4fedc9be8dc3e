"""Quiz Session: State machine for a single playthrough of the question bank."""

import logging
import random
from enum import Enum
from typing import List, Optional, Tuple

from .question_bank import ALL_TOPICS, QuestionBank, QuestionRecord

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    LOCKED = "locked"
    FINISHED = "finished"
    EMPTY = "empty"  # start() matched no questions


class StartResult:
    """Returned by QuizSession.start()."""

    def __init__(self, topic: str, question_count: int):
        self.topic = topic
        self.question_count = question_count

    @property
    def is_empty(self) -> bool:
        return self.question_count == 0

    def __repr__(self) -> str:
        return f"StartResult(topic={self.topic!r}, question_count={self.question_count})"


class GradeResult:
    """Grading of one submitted answer. The only source of truth for feedback."""

    def __init__(self, is_correct: bool, chosen_index: int, correct_index,
                 explanation: str):
        self.is_correct = is_correct
        self.chosen_index = chosen_index
        self.correct_index = correct_index
        self.explanation = explanation

    def __repr__(self) -> str:
        return (f"GradeResult(is_correct={self.is_correct}, chosen_index={self.chosen_index}, "
                f"correct_index={self.correct_index!r})")

    def to_dict(self) -> dict:
        return {
            "is_correct": self.is_correct,
            "chosen_index": self.chosen_index,
            "correct_index": self.correct_index,
            "explanation": self.explanation,
        }


class QuestionView:
    """Read-only projection of the question currently on screen."""

    def __init__(self, display_id: str, question: str, topic: str, options: List[str],
                 position: int, total: int):
        self.display_id = display_id
        self.question = question
        self.topic = topic
        self.options = options
        self.position = position
        self.total = total

    def to_dict(self) -> dict:
        return {
            "id": self.display_id,
            "question": self.question,
            "topic": self.topic,
            "options": list(self.options),
            "position": self.position,
            "total": self.total,
        }


class SessionSummary:
    """Final score of a finished run."""

    def __init__(self, score: int, total: int):
        self.score = score
        self.total = total

    @property
    def percentage(self) -> float:
        return (self.score / self.total * 100) if self.total > 0 else 0.0

    def to_dict(self) -> dict:
        return {"score": self.score, "total": self.total, "percentage": self.percentage}


class QuizSession:
    """
    Drives one playthrough: ordering, answer intake, grading and progression.

    Commands are expected to be issued sequentially. Any command that is not
    valid in the current state is ignored rather than raising, so stray or
    duplicate calls from the presentation layer cannot corrupt the run.
    """

    def __init__(self, bank: QuestionBank, rng=None):
        self.bank = bank
        self._rng = rng if rng is not None else random.Random()
        self._topic: Optional[str] = None
        self._active: List[QuestionRecord] = []
        self._index = 0
        self._score = 0
        self._locked = False
        self._state = SessionState.IDLE
        self._last_result: Optional[GradeResult] = None
        self._results: List[GradeResult] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def topic(self) -> Optional[str]:
        return self._topic

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def last_result(self) -> Optional[GradeResult]:
        return self._last_result

    def active_questions(self) -> List[QuestionRecord]:
        return list(self._active)

    def _shuffle(self, items: list) -> list:
        # Fisher-Yates over the injected random source
        for i in range(len(items) - 1, 0, -1):
            j = self._rng.randrange(i + 1)
            items[i], items[j] = items[j], items[i]
        return items

    def start(self, topic: str = ALL_TOPICS) -> StartResult:
        """Begin a new run over the (shuffled) questions for ``topic``."""
        self._topic = topic
        self._active = self._shuffle(self.bank.questions_for_topic(topic))
        self._index = 0
        self._score = 0
        self._locked = False
        self._last_result = None
        self._results = []

        if not self._active:
            self._state = SessionState.EMPTY
            logger.warning(f"No questions found for topic '{topic}'")
        else:
            self._state = SessionState.AWAITING_ANSWER
            logger.info(f"Started quiz on topic '{topic}' with {len(self._active)} questions")
        return StartResult(topic, len(self._active))

    def submit_answer(self, chosen_index) -> Optional[GradeResult]:
        """Grade ``chosen_index`` against the current question.

        Returns None (and changes nothing) when no answer can be accepted: the
        session is not awaiting an answer, or the index is missing or out of
        range for the current options.
        """
        if self._state is not SessionState.AWAITING_ANSWER:
            logger.debug(f"Ignoring submit_answer in state {self._state.value}")
            return None
        if not isinstance(chosen_index, int) or isinstance(chosen_index, bool):
            logger.debug(f"Ignoring non-integer answer {chosen_index!r}")
            return None

        question = self._active[self._index]
        if not 0 <= chosen_index < len(question.options):
            logger.debug(f"Ignoring out-of-range answer {chosen_index}")
            return None

        is_correct = chosen_index == question.answer_index
        if is_correct:
            self._score += 1
        self._locked = True
        self._state = SessionState.LOCKED

        result = GradeResult(
            is_correct=is_correct,
            chosen_index=chosen_index,
            correct_index=question.answer_index,
            explanation=question.explanation,
        )
        self._last_result = result
        self._results.append(result)
        logger.debug(f"Graded question {self._index + 1}: {result.to_dict()}")
        return result

    def advance(self) -> SessionState:
        """Move past a graded question; finishes the run after the last one."""
        if self._state is not SessionState.LOCKED:
            logger.debug(f"Ignoring advance in state {self._state.value}")
            return self._state

        self._locked = False
        self._last_result = None
        if self._index >= len(self._active) - 1:
            self._state = SessionState.FINISHED
            logger.info(f"Quiz finished: {self._score}/{len(self._active)}")
        else:
            self._index += 1
            self._state = SessionState.AWAITING_ANSWER
        return self._state

    def reset(self):
        """Abandon the current run and return to idle."""
        self._topic = None
        self._active = []
        self._index = 0
        self._score = 0
        self._locked = False
        self._last_result = None
        self._results = []
        self._state = SessionState.IDLE

    def current_question_view(self) -> Optional[QuestionView]:
        if self._state not in (SessionState.AWAITING_ANSWER, SessionState.LOCKED):
            return None
        question = self._active[self._index]
        position, total = self.progress()
        return QuestionView(
            display_id=question.display_id(self._index + 1),
            question=question.question,
            topic=question.topic_label,
            options=list(question.options),
            position=position,
            total=total,
        )

    def progress(self) -> Tuple[int, int]:
        total = len(self._active)
        if total == 0:
            return 0, 0
        return min(self._index + 1, total), total

    def score_so_far(self) -> int:
        return self._score

    def summary(self) -> Optional[SessionSummary]:
        """Final score and total; only available once the run has finished."""
        if self._state is not SessionState.FINISHED:
            return None
        return SessionSummary(self._score, len(self._active))

    def history(self) -> List[GradeResult]:
        """Grading results of the current run, in answer order."""
        return list(self._results)
