import pytest

from competency.extraction import (
    extract_competency_codes_from_text,
    extract_competency_data,
    to_task_competencies,
    unique_competency_codes,
)
from competency.taxonomy import CompetencyTaxonomy
from models.competency_analysis import DemonstratedCompetency


def comp(code="C1", confidence=90, explanation="Led project planning and budget control"):
    return {"code": code, "confidence_percentage": confidence, "explanation": explanation}


def test_valid_payload_is_extracted(c1_response):
    outcome = extract_competency_data(c1_response)

    assert outcome.is_valid
    assert outcome.errors == ()
    [demonstrated] = outcome.analysis.demonstrated_competencies
    assert demonstrated.code == "C1"
    assert demonstrated.confidence_percentage == 90
    assert demonstrated.explanation == "Led project planning and budget control"


def test_invalid_code_is_dropped_and_reported(make_response, make_payload):
    outcome = extract_competency_data(make_response(make_payload([comp(code="Z9")])))

    assert not outcome.is_valid
    assert list(outcome.errors) == ["Invalid competency code: Z9"]
    assert outcome.analysis.demonstrated_competencies == ()


def test_duplicate_codes_keep_first_occurrence(make_response, make_payload):
    text = make_response(
        make_payload(
            [
                comp(code="A1", confidence=80, explanation="First explanation of A1"),
                comp(code="A1", confidence=60, explanation="Second explanation of A1"),
            ]
        )
    )
    outcome = extract_competency_data(text)

    assert not outcome.is_valid
    assert list(outcome.errors) == ["Duplicate competency code: A1"]
    [kept] = outcome.analysis.demonstrated_competencies
    assert kept.confidence_percentage == 80
    assert kept.explanation == "First explanation of A1"


def test_no_json_block():
    outcome = extract_competency_data("**Analysis:** B2 at 85%")

    assert not outcome.is_valid
    assert list(outcome.errors) == ["No JSON structure found in response"]
    assert outcome.analysis.is_empty()


@pytest.mark.parametrize("text", ["", "```python\n{\"analysis\": {}}\n```"])
def test_non_json_fences_are_ignored(text):
    assert list(extract_competency_data(text).errors) == ["No JSON structure found in response"]


def test_parse_error_is_reported(make_response):
    outcome = extract_competency_data(make_response('{"analysis": {"demonstrated_competencies": [}'))

    assert not outcome.is_valid
    [error] = outcome.errors
    assert error.startswith("JSON parsing error: ")
    assert outcome.analysis.is_empty()


def test_non_standard_constants_are_parse_errors(make_response):
    body = '{"analysis": {"demonstrated_competencies": [{"code": "C1", "confidence_percentage": NaN, "explanation": "Led project planning"}]}}'
    outcome = extract_competency_data(make_response(body))

    [error] = outcome.errors
    assert error.startswith("JSON parsing error: ")
    assert "NaN" in error


@pytest.mark.parametrize("payload", [{}, {"analysis": None}, {"analysis": []}, {"result": {}}, [1, 2], '"analysis"'])
def test_missing_analysis_object(make_response, payload):
    outcome = extract_competency_data(make_response(payload))

    assert not outcome.is_valid
    assert list(outcome.errors) == ["Missing analysis object in JSON"]


def test_absent_lists_default_to_empty(make_response):
    outcome = extract_competency_data(make_response({"analysis": {}}))

    assert outcome.is_valid
    assert outcome.analysis.is_empty()


def test_empty_demonstrated_list_is_valid(make_response, make_payload):
    outcome = extract_competency_data(make_response(make_payload()))

    assert outcome.is_valid
    assert outcome.analysis.demonstrated_competencies == ()


def test_non_list_entries_are_reported(make_response):
    outcome = extract_competency_data(
        make_response({"analysis": {"demonstrated_competencies": {"code": "C1"}}})
    )

    assert list(outcome.errors) == ["demonstrated_competencies must be a list"]
    assert outcome.analysis.is_empty()


@pytest.mark.parametrize("key", ["demonstrated_competencies", "development_opportunities"])
def test_null_entries_are_reported(make_response, key):
    outcome = extract_competency_data(make_response({"analysis": {key: None}}))

    assert not outcome.is_valid
    assert list(outcome.errors) == [f"{key} must be a list"]
    assert outcome.analysis.is_empty()


@pytest.mark.parametrize("confidence", [1, 100, 50, 90.0])
def test_confidence_bounds_accepted(make_response, make_payload, confidence):
    outcome = extract_competency_data(make_response(make_payload([comp(confidence=confidence)])))

    assert outcome.is_valid
    [demonstrated] = outcome.analysis.demonstrated_competencies
    assert demonstrated.confidence_percentage == int(confidence)
    assert isinstance(demonstrated.confidence_percentage, int)


@pytest.mark.parametrize(
    "confidence,error",
    [
        (0, "Confidence percentage must be between 1 and 100"),
        (101, "Confidence percentage must be between 1 and 100"),
        (-5, "Confidence percentage must be between 1 and 100"),
        (85.5, "Confidence percentage must be a whole number"),
        ("90", "Confidence percentage must be a number"),
        (True, "Confidence percentage must be a number"),
        (None, "Confidence percentage must be a number"),
    ],
)
def test_confidence_rejected(make_response, make_payload, confidence, error):
    outcome = extract_competency_data(make_response(make_payload([comp(confidence=confidence)])))

    assert list(outcome.errors) == [error]
    assert outcome.analysis.demonstrated_competencies == ()


def test_huge_confidence_does_not_raise(make_response):
    body = '{"analysis": {"demonstrated_competencies": [{"code": "C1", "confidence_percentage": 1e400, "explanation": "Led project planning"}]}}'
    outcome = extract_competency_data(make_response(body))

    assert not outcome.is_valid
    assert outcome.analysis.demonstrated_competencies == ()


def test_explanation_of_exactly_ten_characters_after_trim_is_accepted(make_response, make_payload):
    outcome = extract_competency_data(make_response(make_payload([comp(explanation="   abcdefghij   ")])))

    assert outcome.is_valid
    assert len(outcome.analysis.demonstrated_competencies) == 1


@pytest.mark.parametrize(
    "explanation,error",
    [
        ("   abcdefghi   ", "Explanation must be at least 10 characters long"),
        ("", "Explanation is required and must be a string"),
        (None, "Explanation is required and must be a string"),
        (42, "Explanation is required and must be a string"),
    ],
)
def test_explanation_rejected(make_response, make_payload, explanation, error):
    outcome = extract_competency_data(make_response(make_payload([comp(explanation=explanation)])))

    assert list(outcome.errors) == [error]


def test_every_field_error_of_an_entry_is_reported(make_response, make_payload):
    outcome = extract_competency_data(
        make_response(make_payload([{"code": 7, "confidence_percentage": 0, "explanation": "short"}]))
    )

    assert list(outcome.errors) == [
        "Competency code is required and must be a string",
        "Confidence percentage must be between 1 and 100",
        "Explanation must be at least 10 characters long",
    ]


def test_invalid_entries_do_not_block_later_ones(make_response, make_payload):
    text = make_response(
        make_payload(
            [
                comp(code="Z9"),
                "not an object",
                comp(code="B3", confidence=70, explanation="Evaluated the rollout results"),
            ]
        )
    )
    outcome = extract_competency_data(text)

    assert not outcome.is_valid
    assert list(outcome.errors) == ["Invalid competency code: Z9", "Competency entry must be an object"]
    assert outcome.analysis.codes == ["B3"]


def test_development_opportunities_are_validated(make_response, make_payload):
    text = make_response(
        make_payload(
            [comp()],
            [
                {"code": "D2", "suggestion": "Present the budget review to the steering group"},
                {"code": "D2", "suggestion": "Write up the lessons learned as a short paper"},
                {"code": "X1", "suggestion": "Something long enough to pass"},
                {"code": "E4", "suggestion": "too short"},
                {"suggestion": "Missing its competency code entirely"},
                None,
            ],
        )
    )
    outcome = extract_competency_data(text)

    assert not outcome.is_valid
    assert [opp.code for opp in outcome.analysis.development_opportunities] == ["D2", "D2"]
    assert list(outcome.errors) == [
        "Invalid competency code in development opportunity: X1",
        "Development suggestion must be at least 10 characters long",
        "Development opportunity code is required and must be a string",
        "Development opportunity must be an object",
    ]


def test_only_first_json_block_is_used(make_response, make_payload):
    first = make_response(make_payload([comp(code="A2", explanation="Developed a novel test rig")]))
    second = make_response(make_payload([comp(code="E1", explanation="Followed the code of conduct")]))

    outcome = extract_competency_data(first + second)

    assert outcome.analysis.codes == ["A2"]


def test_injected_taxonomy_restricts_codes(c1_response):
    taxonomy = CompetencyTaxonomy.from_records([{"id": "A1", "category": "A"}])

    outcome = extract_competency_data(c1_response, taxonomy)

    assert list(outcome.errors) == ["Invalid competency code: C1"]


def test_extraction_is_idempotent(make_response, make_payload):
    text = make_response(make_payload([comp(), comp(code="Z9")]))

    assert extract_competency_data(text) == extract_competency_data(text)


def test_bare_codes_first_seen_order_without_repeats():
    text = "C2 was strong, A1 less so. C2 again, plus B7, A12, xA1 and F1. Finally E5."

    assert extract_competency_codes_from_text(text) == ["C2", "A1", "E5"]


def test_bare_codes_match_inside_markdown():
    assert extract_competency_codes_from_text("- **B2**: testing (D1)") == ["B2", "D1"]


def test_unique_competency_codes():
    demonstrated = [
        DemonstratedCompetency(code="C1", confidence_percentage=90, explanation="Led project planning"),
        DemonstratedCompetency(code="Q1", confidence_percentage=90, explanation="Not a UK-SPEC code"),
        DemonstratedCompetency(code="C1", confidence_percentage=50, explanation="Led project planning again"),
        DemonstratedCompetency(code="A2", confidence_percentage=60, explanation="Built a novel solution"),
    ]

    assert unique_competency_codes(demonstrated) == ["C1", "A2"]


def test_to_task_competencies():
    demonstrated = [
        DemonstratedCompetency(code="C1", confidence_percentage=90, explanation="Led project planning"),
    ]

    assert to_task_competencies(demonstrated) == [
        {
            "competency_code_id": "C1",
            "confidence_score": 90,
            "notes": "Led project planning",
            "source_type": "ai_suggested",
        }
    ]
    [row] = to_task_competencies(demonstrated, task_id="task-1", source_type="ai_modified")
    assert row["task_id"] == "task-1"
    assert row["source_type"] == "ai_modified"


def test_suggestion_of_exactly_ten_characters_after_trim_is_accepted(make_response, make_payload):
    outcome = extract_competency_data(
        make_response(make_payload([comp()], [{"code": "D2", "suggestion": "   abcdefghij   "}]))
    )

    assert outcome.is_valid
    assert [opp.code for opp in outcome.analysis.development_opportunities] == ["D2"]


def test_bare_code_word_boundaries_are_ascii():
    # é is not a word character here, so A1 stands on its own
    assert extract_competency_codes_from_text("éA1 and B2") == ["A1", "B2"]


def test_core_modules_do_not_attach_log_handlers():
    import competency.classifier
    import competency.detection
    import competency.extraction

    for module in (competency.extraction, competency.detection, competency.classifier):
        assert module.logger.name == module.__name__
        assert module.logger.handlers == []
