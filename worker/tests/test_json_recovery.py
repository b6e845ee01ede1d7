import json

from meeting_insights.services.json_recovery import (
    extract_fenced_json,
    repair_brackets,
    strip_markdown,
    try_parse_json,
    try_parse_json_from_array,
)


def test_strip_markdown_removes_fences_case_insensitive():
    assert strip_markdown('```JSON\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_markdown("  ```\nplain\n```  ") == "plain"


def test_parse_json_embedded_in_prose_with_trailing_commas():
    assert try_parse_json('Here you go: {"a": [1, 2,], } thanks') == {"a": [1, 2]}


def test_parse_truncated_json_closes_open_brackets():
    assert try_parse_json('{"tasks": [{"task": "Ship"') == {"tasks": [{"task": "Ship"}]}


def test_parse_truncated_inside_string_literal():
    assert try_parse_json('{"summary": "Discussed the roadm') == {"summary": "Discussed the roadm"}


def test_brackets_inside_strings_are_ignored_by_repair():
    assert repair_brackets('{"text": "a [b {c"') == '{"text": "a [b {c"}'
    assert repair_brackets('{"a": "x\\"[y"') == '{"a": "x\\"[y"}'


def test_prose_and_scalars_are_not_parsed():
    assert try_parse_json("just some words") is None
    assert try_parse_json("42") is None
    assert try_parse_json(None) is None  # type: ignore[arg-type]


def test_mismatched_closer_does_not_raise():
    assert try_parse_json('{"a": [1, 2}') is None


def test_truncation_at_any_point_never_raises():
    doc = json.dumps({
        "nextTasks": [{"task": "Email finance", "priority": "high", "references": ["Ana (00:01) \"quote\""]}],
        "summary": {"text": "Plan [draft]", "bullets": ["one", "two"]},
    })
    for cut in range(len(doc) + 1):
        value = try_parse_json(doc[:cut])
        if value is not None:
            json.dumps(value)


def test_deep_nesting_returns_none():
    assert try_parse_json("[" * 50000) is None


def test_parse_from_array_of_lines():
    assert try_parse_json_from_array(["{", '"a": 1', "}"]) == {"a": 1}
    assert try_parse_json_from_array(["no", "json here"]) is None
    assert try_parse_json_from_array([1, 2]) is None
    assert try_parse_json_from_array([]) is None


def test_extract_every_fenced_block():
    text = '```json\n{"a": 1}\n```\nsome text\n```json\n{"b": 2}\n```\n```json\nnot json\n```'
    assert extract_fenced_json(text) == [{"a": 1}, {"b": 2}]
