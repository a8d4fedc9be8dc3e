"""Tests for the QuestionBank module."""
import json
import os
import tempfile
import urllib.error
from unittest.mock import MagicMock, patch

import pytest
from quiz_runner.question_bank import (
    ALL_TOPICS,
    FormatError,
    QuestionBank,
    QuestionRecord,
    TransportError,
)


SAMPLE_CATALOG = [
    {
        "id": "PY-1",
        "topic": "Python",
        "question": "What is a list?",
        "options": ["A mapping", "An ordered collection", "A number"],
        "answerIndex": 1,
        "explanation": "Lists are ordered, mutable sequences.",
    },
    {
        "id": "PY-2",
        "topic": "Python",
        "question": "What does len() return for an empty string?",
        "options": ["0", "None", "-1"],
        "answerIndex": 0,
    },
    {
        "id": "ML-1",
        "topic": "ML",
        "question": "What is overfitting?",
        "options": ["Fitting noise in training data", "Too few parameters"],
        "answerIndex": 0,
    },
    {
        "question": "Untopical question",
        "options": ["yes", "no"],
        "answerIndex": 0,
    },
]


@pytest.fixture
def bank():
    b = QuestionBank()
    b.load(SAMPLE_CATALOG)
    return b


@pytest.fixture
def catalog_file():
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(SAMPLE_CATALOG, f)
        path = f.name
    yield path
    os.unlink(path)


def test_load_counts(bank):
    assert bank.loaded_count == 4
    assert bank.is_loaded is True


def test_load_drops_malformed_entries():
    raw = [
        {"options": ["A", "B"], "answerIndex": 1, "topic": "x"},
        {"options": "not-an-array", "answerIndex": 0},
        {"options": ["C", "D"], "answerIndex": 0, "topic": "y"},
    ]
    bank = QuestionBank()
    result = bank.load(raw)
    assert result.accepted_count == 2
    assert result.rejected_count == 1
    assert bank.loaded_count == 2


@pytest.mark.parametrize("entry", [
    None,
    "just a string",
    42,
    {"options": ["A"]},
    {"answerIndex": 0},
    {"options": ["A", "B"], "answerIndex": "1"},
    {"options": ["A", "B"], "answerIndex": True},
    {"options": {"a": 1}, "answerIndex": 0},
])
def test_invalid_entries_rejected(entry):
    assert QuestionRecord.from_dict(entry) is None


def test_accepted_count_never_exceeds_input():
    raw = SAMPLE_CATALOG + [{"options": None, "answerIndex": 0}, []]
    bank = QuestionBank()
    result = bank.load(raw)
    assert result.accepted_count <= len(raw)
    assert result.accepted_count + result.rejected_count == len(raw)
    for q in bank.questions():
        assert isinstance(q.options, tuple)
        assert isinstance(q.answer_index, (int, float))


def test_load_rejects_non_sequence():
    bank = QuestionBank()
    with pytest.raises(FormatError):
        bank.load({"questions": SAMPLE_CATALOG})
    assert bank.loaded_count == 0
    assert bank.topics() == []


def test_failed_load_clears_previous_contents(bank):
    with pytest.raises(FormatError):
        bank.load("not a list")
    assert bank.loaded_count == 0
    assert bank.is_loaded is False


def test_placeholders_for_missing_fields():
    record = QuestionRecord.from_dict({"options": ["A"], "answerIndex": 0, "question": ""})
    assert record.question == "Untitled question"
    assert record.explanation == "No explanation provided."
    assert record.topic is None
    assert record.topic_label == "Unknown Topic"
    assert record.display_id(3) == "Q3"


def test_display_id_uses_record_id():
    record = QuestionRecord.from_dict({"id": 17, "options": ["A"], "answerIndex": 0})
    assert record.display_id(1) == "17"


def test_integral_float_answer_index_normalized():
    record = QuestionRecord.from_dict({"options": ["A", "B"], "answerIndex": 1.0})
    assert record.answer_index == 1
    assert isinstance(record.answer_index, int)


def test_empty_options_accepted_but_not_playable():
    record = QuestionRecord.from_dict({"options": [], "answerIndex": 0})
    assert record is not None
    assert record.is_playable is False


def test_record_is_immutable(bank):
    record = bank.questions()[0]
    with pytest.raises(AttributeError):
        record.answer_index = 2


def test_topics_sorted_and_distinct(bank):
    assert bank.topics() == ["ML", "Python"]


def test_topics_case_insensitive_order():
    bank = QuestionBank()
    bank.load([
        {"options": ["A"], "answerIndex": 0, "topic": "docker"},
        {"options": ["A"], "answerIndex": 0, "topic": "Ansible"},
        {"options": ["A"], "answerIndex": 0, "topic": "Kubernetes"},
        {"options": ["A"], "answerIndex": 0, "topic": "docker"},
    ])
    assert bank.topics() == ["Ansible", "docker", "Kubernetes"]


def test_all_is_never_a_derived_topic():
    bank = QuestionBank()
    bank.load([
        {"options": ["A"], "answerIndex": 0, "topic": ALL_TOPICS},
        {"options": ["A"], "answerIndex": 0, "topic": "x"},
    ])
    assert ALL_TOPICS not in bank.topics()
    assert bank.topics() == ["x"]


def test_questions_for_all_includes_untopical(bank):
    questions = bank.questions_for_topic(ALL_TOPICS)
    assert len(questions) == 4
    assert any(q.topic is None for q in questions)


def test_questions_for_topic_exact_match(bank):
    ids = [q.id for q in bank.questions_for_topic("Python")]
    assert ids == ["PY-1", "PY-2"]
    assert bank.questions_for_topic("python") == []
    assert bank.questions_for_topic("Nope") == []


def test_questions_for_topic_returns_copy(bank):
    questions = bank.questions_for_topic(ALL_TOPICS)
    questions.reverse()
    assert bank.questions()[0].id == "PY-1"


def test_load_catalog_from_file(catalog_file):
    bank = QuestionBank()
    result = bank.load_catalog(catalog_file)
    assert result.accepted_count == 4
    assert bank.topics() == ["ML", "Python"]


def test_load_catalog_from_yaml(tmp_path):
    path = tmp_path / "questions.yaml"
    path.write_text(
        "- topic: Linux\n"
        "  question: Which command lists files?\n"
        "  options: [ls, cd, rm]\n"
        "  answerIndex: 0\n"
    )
    bank = QuestionBank()
    result = bank.load_catalog(path)
    assert result.accepted_count == 1
    assert bank.topics() == ["Linux"]


def test_load_catalog_missing_file_raises_transport_error(tmp_path):
    bank = QuestionBank()
    with pytest.raises(TransportError) as excinfo:
        bank.load_catalog(tmp_path / "missing.json")
    assert isinstance(excinfo.value.__cause__, OSError)
    assert bank.loaded_count == 0
    assert bank.topics() == []


def test_load_catalog_invalid_json_raises_format_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    bank = QuestionBank()
    with pytest.raises(FormatError):
        bank.load_catalog(path)


def test_load_catalog_top_level_object_raises_format_error(tmp_path):
    path = tmp_path / "object.json"
    path.write_text(json.dumps({"questions": SAMPLE_CATALOG}))
    bank = QuestionBank()
    with pytest.raises(FormatError):
        bank.load_catalog(path)
    assert bank.loaded_count == 0


def test_load_catalog_from_url():
    response = MagicMock()
    response.status = 200
    response.read.return_value = json.dumps(SAMPLE_CATALOG).encode("utf-8")
    response.__enter__.return_value = response

    with patch("urllib.request.urlopen", return_value=response) as mock_open:
        bank = QuestionBank(fetch_timeout=3)
        result = bank.load_catalog("https://example.com/questions.json")

    assert result.accepted_count == 4
    assert mock_open.call_args[1]["timeout"] == 3


def test_load_catalog_http_error_raises_transport_error():
    error = urllib.error.HTTPError("https://example.com/q.json", 404, "Not Found", {}, None)
    with patch("urllib.request.urlopen", side_effect=error):
        bank = QuestionBank()
        with pytest.raises(TransportError) as excinfo:
            bank.load_catalog("https://example.com/q.json")
    assert "404" in str(excinfo.value)
    assert excinfo.value.__cause__ is error
    assert bank.loaded_count == 0


def test_load_catalog_connection_error_raises_transport_error():
    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
        bank = QuestionBank()
        with pytest.raises(TransportError):
            bank.load_catalog("http://localhost:1/q.json")


def test_zero_id_is_kept_for_display():
    record = QuestionRecord.from_dict({"id": 0, "options": ["A"], "answerIndex": 0})
    assert record.id == 0
    assert record.display_id(1) == "0"


def test_blank_id_uses_positional_placeholder():
    record = QuestionRecord.from_dict({"id": "", "options": ["A"], "answerIndex": 0})
    assert record.display_id(4) == "Q4"


def test_whitespace_only_text_uses_placeholders():
    record = QuestionRecord.from_dict({
        "options": ["A"],
        "answerIndex": 0,
        "question": "   ",
        "explanation": "\n",
        "topic": " ",
    })
    assert record.question == "Untitled question"
    assert record.explanation == "No explanation provided."
    assert record.topic is None
