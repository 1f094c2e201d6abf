"""Tests for model-output parsing and repair."""

import pytest

from repo_onboarding.domain.entities import AssessmentTask
from repo_onboarding.domain.exceptions import MalformedAIResponseError
from repo_onboarding.services.response_parser import (
    FALLBACK_RECOMMENDATION,
    parse_assessment_task,
    parse_bulleted_list,
    parse_conventions,
    parse_evaluation,
    parse_json_payload,
    strip_code_fence,
)


class TestParseBulletedList:
    def test_deduplicates_preserving_order(self):
        assert parse_bulleted_list("- a\n- b\n- a") == ["a", "b"]

    def test_ignores_non_bullet_lines(self):
        text = "Here are my recommendations:\n\n  - Add tests  \nSome prose\n- Use CI\n"
        assert parse_bulleted_list(text) == ["Add tests", "Use CI"]

    def test_empty_text_falls_back(self):
        assert parse_bulleted_list("") == [FALLBACK_RECOMMENDATION]
        assert parse_bulleted_list(None) == [FALLBACK_RECOMMENDATION]

    def test_no_bullets_falls_back(self):
        assert parse_bulleted_list("1. numbered\n2. list") == [FALLBACK_RECOMMENDATION]

    def test_bare_markers_are_dropped(self):
        assert parse_bulleted_list("-\n- \n- real") == ["real"]

    def test_markdown_rules_are_not_items(self):
        text = "- a\n---\n--- d\n***\n- b"
        assert parse_bulleted_list(text) == ["a", "b"]

    def test_custom_marker(self):
        assert parse_bulleted_list("* one\n* two", marker="*") == ["one", "two"]


class TestStripCodeFence:
    @pytest.mark.parametrize(
        "text",
        [
            '```json\n{"a": 1}\n```',
            '```\n{"a": 1}\n```',
            '  ```json\n{"a": 1}\n```  ',
            '{"a": 1}',
            'Sure, here it is:\n```json\n{"a": 1}\n```\nAnything else?',
            '```json{"a": 1}```',
        ],
    )
    def test_known_shapes(self, text):
        assert strip_code_fence(text) == '{"a": 1}'

    def test_fence_inside_json_string_survives(self):
        text = '```json\n{"code": "```py\\nx = 1\\n```"}\n```'
        assert parse_json_payload(text) == {"code": "```py\nx = 1\n```"}


class TestParseJsonPayload:
    def test_parses_fenced_json(self):
        assert parse_json_payload('```json\n[1, 2]\n```') == [1, 2]

    def test_bare_json_with_fence_inside_string(self):
        text = '{"code": "```py\\nx = 1\\n```"}'
        assert parse_json_payload(text) == {"code": "```py\nx = 1\n```"}

    def test_bare_json_with_surrounding_whitespace(self):
        assert parse_json_payload('\n  {"a": 1}  \n') == {"a": 1}

    def test_missing_closing_brace_raises(self):
        raw = '{"score": 80, "feedback": "ok"'
        with pytest.raises(MalformedAIResponseError) as excinfo:
            parse_json_payload(raw)
        assert excinfo.value.raw == raw

    def test_prose_raises(self):
        with pytest.raises(MalformedAIResponseError):
            parse_json_payload("I cannot help with that.")


class TestParseConventions:
    def test_accepts_bare_array(self):
        conventions = parse_conventions(
            '[{"category": "Testing", "description": "Every PR adds tests", '
            '"examples": ["Please add tests"], "source": "PR #7"}]'
        )
        assert conventions[0].category == "Testing"
        assert conventions[0].examples == ["Please add tests"]

    def test_accepts_wrapped_object(self):
        conventions = parse_conventions(
            '{"conventions": [{"category": "Style", "description": "Use black"}]}'
        )
        assert conventions[0].description == "Use black"
        assert conventions[0].examples == []
        assert conventions[0].source == ""

    def test_wrong_shape_raises(self):
        with pytest.raises(MalformedAIResponseError):
            parse_conventions('{"unexpected": true}')

    def test_item_missing_fields_raises(self):
        with pytest.raises(MalformedAIResponseError):
            parse_conventions('[{"category": "Style"}]')


class TestParseAssessmentTask:
    def test_parses_task(self, task_json):
        task = parse_assessment_task(task_json)
        assert task.title == "Add a widget filter"
        assert task.target_files[0].path == "src/index.ts"
        assert task.target_files[0].expected_changes == "Add filter()"
        assert task.language_specific_tips[0].items == ["Use generics"]

    def test_json_mode_task_with_code_block(self):
        text = (
            '{"task": {"title": "T", "description": "Edit:\\n```ts\\nconst a = 1\\n```", '
            '"targetFiles": [{"path": "a.ts", "currentContent": "```ts\\nconst a = 0\\n```", '
            '"expectedChanges": "bump"}]}}'
        )
        task = parse_assessment_task(text)
        assert task.description == "Edit:\n```ts\nconst a = 1\n```"
        assert task.target_files[0].current_content == "```ts\nconst a = 0\n```"

    def test_accepts_unwrapped_task(self):
        task = parse_assessment_task('{"title": "T", "description": "D"}')
        assert task.target_files == []
        assert task.language_specific_tips is None

    def test_missing_title_raises(self):
        with pytest.raises(MalformedAIResponseError):
            parse_assessment_task('{"task": {"description": "D"}}')

    def test_truncated_json_raises(self, task_json):
        with pytest.raises(MalformedAIResponseError):
            parse_assessment_task(task_json[:-2])


class TestParseEvaluation:
    @pytest.fixture
    def task(self):
        return AssessmentTask(
            title="T", description="D", target_files=[], requirements=[], hints=[]
        )

    def test_produces_evaluated_assessment(self, task, evaluation_json):
        assessment = parse_evaluation(evaluation_json, task)
        assert assessment.status == "evaluated"
        assert assessment.score == 42
        assert assessment.task is task
        assert assessment.roadmap == ["Implement the filter", "Add tests"]
        assert assessment.language_specific_feedback[0].items == ["No types added"]

    def test_missing_closing_brace_raises(self, task):
        with pytest.raises(MalformedAIResponseError):
            parse_evaluation('{"score": 80, "feedback": "fine", "roadmap": []', task)

    def test_missing_score_raises(self, task):
        with pytest.raises(MalformedAIResponseError):
            parse_evaluation('{"feedback": "fine"}', task)
