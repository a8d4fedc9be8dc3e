"""Question Bank: Loads, validates and filters the multiple-choice catalog."""

import json
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

ALL_TOPICS = "all"

UNTITLED_QUESTION = "Untitled question"
UNKNOWN_TOPIC = "Unknown Topic"
NO_EXPLANATION = "No explanation provided."


class CatalogError(Exception):
    """Base class for catalog load failures."""


class FormatError(CatalogError):
    """Raised when the catalog document is not an ordered sequence of records."""


class TransportError(CatalogError):
    """Raised when the catalog document could not be fetched or read."""


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _text_or_none(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


class QuestionRecord:
    """A single validated multiple-choice question. Never mutated after load."""

    __slots__ = ("id", "topic", "question", "options", "answer_index", "explanation")

    def __init__(self, options, answer_index, id=None, topic: Optional[str] = None,
                 question: Optional[str] = None, explanation: Optional[str] = None):
        object.__setattr__(self, "id", id)
        object.__setattr__(self, "topic", topic)
        object.__setattr__(self, "question", question or UNTITLED_QUESTION)
        object.__setattr__(self, "options", tuple(options))
        object.__setattr__(self, "answer_index", answer_index)
        object.__setattr__(self, "explanation", explanation or NO_EXPLANATION)

    def __setattr__(self, name, value):
        raise AttributeError(f"QuestionRecord is immutable (tried to set {name!r})")

    def __repr__(self) -> str:
        return (f"QuestionRecord(id={self.id!r}, topic={self.topic!r}, "
                f"question={self.question!r}, answer_index={self.answer_index!r})")

    @classmethod
    def from_dict(cls, raw) -> Optional["QuestionRecord"]:
        """Build a record from a raw catalog entry, or return None if it is unusable.

        An entry is usable when it is a mapping whose ``options`` is a list or
        tuple and whose ``answerIndex`` is a number. Everything else is optional
        and falls back to a placeholder.
        """
        if not isinstance(raw, dict):
            return None
        options = raw.get("options")
        answer_index = raw.get("answerIndex")
        if not isinstance(options, (list, tuple)) or not _is_number(answer_index):
            return None
        if isinstance(answer_index, float) and answer_index.is_integer():
            answer_index = int(answer_index)

        record_id = raw.get("id")
        if record_id == "" or record_id is None:
            record_id = None
        return cls(
            options=options,
            answer_index=answer_index,
            id=record_id,
            topic=_text_or_none(raw.get("topic")),
            question=_text_or_none(raw.get("question")),
            explanation=_text_or_none(raw.get("explanation")),
        )

    @property
    def is_playable(self) -> bool:
        """True when the record has options to choose from."""
        return len(self.options) > 0

    def display_id(self, position: int) -> str:
        """Record id, or ``Q<position>`` when the record carries none."""
        return str(self.id) if self.id is not None else f"Q{position}"

    @property
    def topic_label(self) -> str:
        return self.topic or UNKNOWN_TOPIC

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "topic": self.topic,
            "question": self.question,
            "options": list(self.options),
            "answerIndex": self.answer_index,
            "explanation": self.explanation,
        }


class LoadResult:
    """Outcome of a catalog load."""

    def __init__(self, accepted_count: int, rejected_count: int):
        self.accepted_count = accepted_count
        self.rejected_count = rejected_count

    def __repr__(self) -> str:
        return f"LoadResult(accepted_count={self.accepted_count}, rejected_count={self.rejected_count})"

    def to_dict(self) -> dict:
        return {
            "accepted_count": self.accepted_count,
            "rejected_count": self.rejected_count,
        }


def topic_label(topic: str) -> str:
    """Display name for a topic filter."""
    return "All" if topic == ALL_TOPICS else topic


class QuestionBank:
    """Holds the validated question catalog and the topics derived from it."""

    def __init__(self, fetch_timeout: float = 10.0):
        self.fetch_timeout = fetch_timeout
        self._questions: List[QuestionRecord] = []
        self._topics: List[str] = []
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def loaded_count(self) -> int:
        return len(self._questions)

    def clear(self):
        self._questions = []
        self._topics = []
        self._loaded = False

    def load(self, raw_data) -> LoadResult:
        """Replace the bank contents with the usable entries of ``raw_data``.

        Malformed entries are dropped silently; only the counts reveal them.
        """
        if not isinstance(raw_data, (list, tuple)):
            self.clear()
            raise FormatError("Question catalog must be an array of question objects")

        accepted = []
        for raw in raw_data:
            record = QuestionRecord.from_dict(raw)
            if record is not None:
                accepted.append(record)

        self._questions = accepted
        self._topics = self._derive_topics(accepted)
        self._loaded = True

        result = LoadResult(len(accepted), len(raw_data) - len(accepted))
        if result.rejected_count:
            logger.warning(f"Dropped {result.rejected_count} malformed question(s)")
        logger.info(f"Question bank loaded: {result.accepted_count} questions, "
                    f"{len(self._topics)} topics")
        return result

    def load_catalog(self, source: Union[str, Path]) -> LoadResult:
        """Fetch a catalog document from a path or http(s) URL and load it."""
        source = str(source)
        try:
            text = self._read_source(source)
        except TransportError:
            self.clear()
            raise
        data = self._parse_document(source, text)
        return self.load(data)

    def _read_source(self, source: str) -> str:
        if source.startswith(("http://", "https://")):
            try:
                with urllib.request.urlopen(source, timeout=self.fetch_timeout) as resp:
                    if resp.status != 200:
                        raise TransportError(f"HTTP {resp.status} while fetching {source}")
                    return resp.read().decode("utf-8")
            except urllib.error.HTTPError as e:
                raise TransportError(f"HTTP {e.code} while fetching {source}") from e
            except (urllib.error.URLError, OSError, UnicodeDecodeError) as e:
                raise TransportError(f"Failed to fetch {source}: {e}") from e
        try:
            return Path(source).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TransportError(f"Failed to read {source}: {e}") from e

    def _parse_document(self, source: str, text: str):
        try:
            if source.lower().endswith((".yaml", ".yml")):
                return yaml.safe_load(text)
            return json.loads(text)
        except (ValueError, yaml.YAMLError) as e:
            self.clear()
            raise FormatError(f"Could not parse question catalog {source}: {e}") from e

    @staticmethod
    def _derive_topics(questions: List[QuestionRecord]) -> List[str]:
        topics = {q.topic for q in questions if q.topic and q.topic != ALL_TOPICS}
        return sorted(topics, key=lambda t: (t.casefold(), t))

    def topics(self) -> List[str]:
        """Distinct topics across the bank, sorted."""
        return list(self._topics)

    def questions(self) -> List[QuestionRecord]:
        return list(self._questions)

    def questions_for_topic(self, topic: str) -> List[QuestionRecord]:
        """All records for ``"all"``, otherwise the exact-match topic subset, in load order."""
        if topic == ALL_TOPICS:
            return list(self._questions)
        return [q for q in self._questions if q.topic == topic]
