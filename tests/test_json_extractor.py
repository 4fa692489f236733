import json

import pytest

from insights.json_extractor import extract_json_block


@pytest.mark.parametrize(
    "text, expected",
    [
        ('{"a": 1}', '{"a": 1}'),
        ('Here you go:\n```json\n{"a": {"b": 2}}\n```\nThanks', '{"a": {"b": 2}}'),
        ('{"a": 1} and {"b": 2}', '{"a": 1}'),
        ('{"text": "braces } inside { strings"}', '{"text": "braces } inside { strings"}'),
        ('{"quote": "escaped \\" brace }"}', '{"quote": "escaped \\" brace }"}'),
    ],
)
def test_extracts_first_balanced_block(text, expected):
    block = extract_json_block(text)
    assert block == expected
    json.loads(block)


def test_skips_unbalanced_leading_brace():
    assert extract_json_block('oops { {"a": 1}') == '{"a": 1}'


@pytest.mark.parametrize("text", ["", "no json here", "{ never closed", "} {"])
def test_returns_none_without_balanced_block(text):
    assert extract_json_block(text) is None
