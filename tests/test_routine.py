import pytest

from routine import Routine, extract_json, fallback_routine, parse_routine_content


def test_fenced_block_wins_over_other_braces():
    content = (
        'Here is {"not": "this"} one.\n'
        '```json\n{"title": "Inside", "description": "d", "steps": []}\n```\n'
        "and {another: span}"
    )
    assert extract_json(content) == {"title": "Inside", "description": "d", "steps": []}


def test_brace_span_used_without_fence():
    content = 'Sure! {"title": "Plain", "description": "d", "steps": []} Enjoy.'
    assert extract_json(content)["title"] == "Plain"


def test_brace_span_is_greedy_to_last_closing_brace():
    content = 'prefix {"a": {"b": 1}} suffix'
    assert extract_json(content) == {"a": {"b": 1}}


def test_whole_text_parsed_without_any_match():
    assert extract_json("[1, 2, 3]") == [1, 2, 3]


def test_empty_fenced_block_does_not_parse():
    with pytest.raises(ValueError):
        extract_json("```json\n```")


def test_unparseable_content_becomes_fallback():
    assert parse_routine_content("I cannot help with that.") == fallback_routine()
    assert parse_routine_content('{"title": broken}') == fallback_routine()


def test_fallback_routine_shape():
    fallback = fallback_routine()
    assert fallback["title"] == "Custom Routine"
    assert fallback["description"] == "A personalized routine based on your request"
    assert fallback["steps"] == [
        {
            "step": 1,
            "action": "Start with the basics outlined in your request",
            "duration": "Variable",
            "notes": "Generated content could not be parsed properly",
        }
    ]


def test_fallback_is_a_fresh_copy():
    fallback_routine()["steps"].clear()
    assert len(fallback_routine()["steps"]) == 1


def test_routine_keeps_only_given_keys():
    data = {
        "title": "Energize",
        "description": "Quick AM boost",
        "steps": [{"step": 1, "action": "Stretch", "duration": "5 min"}],
    }
    assert Routine.model_validate(data).to_dict() == data


def test_routine_allows_empty_and_duplicate_steps():
    assert Routine(title="t", description="d").steps == []
    routine = Routine.model_validate(
        {
            "title": "t",
            "description": "d",
            "steps": [{"step": 1, "action": "a"}, {"step": 1, "action": "b"}],
        }
    )
    assert [s.action for s in routine.steps] == ["a", "b"]


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_constants_become_fallback(constant):
    content = '{"title": "t", "description": "d", "steps": [], "score": %s}' % constant

    with pytest.raises(ValueError):
        extract_json(content)
    assert parse_routine_content(content) == fallback_routine()


def test_deeply_nested_content_becomes_fallback():
    assert parse_routine_content("[" * 100000 + "]" * 100000) == fallback_routine()


def test_non_text_content_becomes_fallback():
    assert parse_routine_content({"title": "x"}) == fallback_routine()


def test_step_number_and_types_are_loose():
    routine = Routine.model_validate(
        {"title": "t", "description": "d", "steps": [{"action": "a", "duration": 10}]}
    )
    assert routine.steps[0].step is None
    assert routine.to_dict() == {
        "title": "t",
        "description": "d",
        "steps": [{"action": "a", "duration": 10}],
    }
