"""Single-session multiple-choice quiz runner."""

from .question_bank import (
    ALL_TOPICS,
    CatalogError,
    FormatError,
    LoadResult,
    QuestionBank,
    QuestionRecord,
    TransportError,
)
from .quiz_session import (
    GradeResult,
    QuestionView,
    QuizSession,
    SessionState,
    SessionSummary,
    StartResult,
)

__version__ = "0.1.0"
