import pytest

from contextual_interviewer.models.generation_client import GenerationClient
from contextual_interviewer.models.json_repair import (
    extract_json_object,
    parse_json_loose,
    parse_json_object,
)
from contextual_interviewer.models.llm_client import BackendMalformedResponse
from contextual_interviewer.schemas import Difficulty, QuestionCategory


def test_parse_repairs_single_quotes_and_trailing_commas() -> None:
    assert parse_json_loose("{'a': 1, 'b': 'x',}") == {"a": 1, "b": "x"}


def test_parse_repairs_unquoted_keys_and_fenced_json() -> None:
    raw = """```json
    {a: 1, b: true, c: null,}
    ```"""

    assert parse_json_object(raw) == {"a": 1, "b": True, "c": None}


def test_parse_extracts_object_from_prose_with_bare_values() -> None:
    data = parse_json_object("Sure! {text: 'What is X?', category: technical}")

    assert data == {"text": "What is X?", "category": "technical"}


def test_parse_normalizes_python_literals() -> None:
    assert parse_json_loose("{'ok': True, 'missing': None}") == {"ok": True, "missing": None}


def test_extract_ignores_braces_inside_strings() -> None:
    text = 'Here you go: {"text": "Use {braces} wisely", "category": "technical"} Thanks!'

    assert extract_json_object(text) == '{"text": "Use {braces} wisely", "category": "technical"}'


def test_parse_returns_none_without_object() -> None:
    assert parse_json_object("I cannot answer that.") is None
    assert parse_json_object("") is None


def test_parse_rejects_runaway_nesting() -> None:
    assert parse_json_loose("[" * 200_000 + "]" * 200_000) is None


class TestQuestionValidation:
    """Repair-then-validate of question payloads."""

    def test_valid_question(self) -> None:
        candidate = GenerationClient.parse_question(
            '{"text": "How do you test async code?", "category": "technical", "difficulty": "hard"}'
        )

        assert candidate.text == "How do you test async code?"
        assert candidate.category == QuestionCategory.TECHNICAL
        assert candidate.difficulty == Difficulty.HARD

    def test_category_is_normalized(self) -> None:
        candidate = GenerationClient.parse_question(
            '{"text": "Tell me about a project.", "category": "Project Specific"}'
        )

        assert candidate.category == QuestionCategory.PROJECT_SPECIFIC
        assert candidate.difficulty == Difficulty.MEDIUM

    def test_unknown_difficulty_defaults_to_medium(self) -> None:
        candidate = GenerationClient.parse_question(
            '{"text": "Why Python?", "category": "technical", "difficulty": "brutal"}'
        )

        assert candidate.difficulty == Difficulty.MEDIUM

    def test_unknown_category_is_malformed(self) -> None:
        with pytest.raises(BackendMalformedResponse, match="category"):
            GenerationClient.parse_question('{"text": "Why Python?", "category": "trivia"}')

    def test_blank_text_is_malformed(self) -> None:
        with pytest.raises(BackendMalformedResponse, match="text"):
            GenerationClient.parse_question('{"text": "  \\"\\"  ", "category": "technical"}')

    def test_no_object_is_malformed(self) -> None:
        with pytest.raises(BackendMalformedResponse, match="No JSON object"):
            GenerationClient.parse_question("What is your favourite language?")

    def test_deeply_nested_output_is_malformed(self) -> None:
        nested = "[" * 200_000 + "]" * 200_000
        raw = '{"text": "Q?", "category": "technical", "x": ' + nested + "}"

        with pytest.raises(BackendMalformedResponse):
            GenerationClient.parse_question(raw)


class TestFollowUpParsing:
    """Independent recovery of follow-up parts."""

    def test_full_payload(self) -> None:
        candidate = GenerationClient.parse_follow_up(
            '{"humanResponse": "I see.", "followUpQuestion": '
            '{"text": "Which part was hardest?", "category": "follow-up", "difficulty": "medium"}}'
        )

        assert candidate.human_response == "I see."
        assert candidate.question_text == "Which part was hardest?"

    def test_missing_question_keeps_response(self) -> None:
        candidate = GenerationClient.parse_follow_up('{"humanResponse": "Nice."}')

        assert candidate.human_response == "Nice."
        assert candidate.question_text is None

    def test_missing_response_keeps_question(self) -> None:
        candidate = GenerationClient.parse_follow_up('{"followUpQuestion": {"text": "Why?"}}')

        assert candidate.human_response is None
        assert candidate.question_text == "Why?"

    def test_empty_payload_is_malformed(self) -> None:
        with pytest.raises(BackendMalformedResponse):
            GenerationClient.parse_follow_up('{"unrelated": 1}')
