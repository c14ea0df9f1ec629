from datetime import date

import pytest
from pydantic import ValidationError

from handicap_tracker.schemas import CourseType, RoundCreate, StoredRoundRecord


def valid_input(**overrides):
    data = {
        "date": "2024-05-01",
        "course": "  Pebble Beach ",
        "tees": "blue",
        "holes": 18,
        "score": 90,
        "par": 72,
        "rating": 71.2,
        "slope": 125,
        "course_type": "regulation",
    }
    data.update(overrides)
    return data


def sheet_row(**overrides):
    # como llega de la hoja: todo texto
    row = {
        "id": "1714567890123",
        "date": "2024-05-01",
        "course": "Pebble Beach",
        "tees": "blue",
        "courseType": "executive",
        "includeInHandicap": "true",
        "holes": "18",
        "score": "90",
        "par": "72",
        "adjScore": "90",
        "rating": "71.2",
        "slope": "125",
        "differential": "17",
    }
    row.update(overrides)
    return row


# ------------------------------------------------------------------ input

def test_round_create_defaults_and_cleanup():
    data = valid_input()
    del data["course_type"]
    payload = RoundCreate(**data)

    assert payload.course == "Pebble Beach"
    assert payload.date == date(2024, 5, 1)
    assert payload.include_in_handicap is True
    assert payload.course_type == CourseType.regulation


def test_round_create_tees_optional():
    data = valid_input()
    del data["tees"]
    assert RoundCreate(**data).tees is None


@pytest.mark.parametrize(
    "field, value",
    [
        ("holes", 10),
        ("slope", 54),
        ("slope", 156),
        ("score", 0),
        ("score", 201),
        ("par", 0),
        ("rating", 0),
        ("rating", 151),
        ("course", "A"),
        ("course_type", "links"),
    ],
)
def test_round_create_rejects_out_of_range(field, value):
    with pytest.raises(ValidationError):
        RoundCreate(**valid_input(**{field: value}))


def test_round_create_requires_fields():
    data = valid_input()
    del data["score"]
    with pytest.raises(ValidationError):
        RoundCreate(**data)


# ------------------------------------------------------------ sheet decode

def test_decode_text_row():
    r = StoredRoundRecord.model_validate(sheet_row()).to_round()

    assert r.id == "1714567890123"
    assert r.date == date(2024, 5, 1)
    assert r.course_type == CourseType.executive
    assert r.holes == 18
    assert r.score == 90
    assert r.rating == pytest.approx(71.2)
    assert r.differential == pytest.approx(17.0)
    assert r.include_in_handicap is True


def test_decode_defaults_for_missing_columns():
    row = sheet_row(courseType="", tees="")
    del row["includeInHandicap"]

    r = StoredRoundRecord.model_validate(row).to_round()

    assert r.course_type == CourseType.regulation
    assert r.tees == ""
    assert r.include_in_handicap is True


@pytest.mark.parametrize(
    "stored, expected",
    [("false", False), ("true", True), ("FALSE", True), ("no", True), ("", True)],
)
def test_only_exact_false_marker_excludes(stored, expected):
    r = StoredRoundRecord.model_validate(sheet_row(includeInHandicap=stored)).to_round()
    assert r.include_in_handicap is expected


def test_decode_keeps_calendar_date_of_timestamp():
    r = StoredRoundRecord.model_validate(sheet_row(date="2024-05-01T00:00:00.000Z")).to_round()
    assert r.date == date(2024, 5, 1)


def test_stored_differential_is_not_recomputed():
    # legacy row computed with a doubled 9-hole rating
    row = sheet_row(holes="9", score="45", par="36", adjScore="90", rating="35.6",
                    slope="120", differential="17.3")

    r = StoredRoundRecord.model_validate(row).to_round()

    assert r.differential == pytest.approx(17.3)


def test_blank_differential_is_derived_once():
    row = sheet_row(holes="9", score="48", par="36", adjScore="", rating="35.5",
                    slope="115", differential="")

    r = StoredRoundRecord.model_validate(row).to_round()

    assert r.adj_score == 96
    assert r.differential == pytest.approx(59.45)


def test_decode_accepts_snake_case_columns():
    row = {
        "id": "abc",
        "date": "2023-09-12",
        "course": "Augusta",
        "course_type": "par3",
        "include_in_handicap": "false",
        "holes": 9,
        "score": 27,
        "par": 27,
        "adj_score": 54,
        "rating": 27.0,
        "slope": 80,
        "differential": 38.14,
    }

    r = StoredRoundRecord.model_validate(row).to_round()

    assert r.course_type == CourseType.par3
    assert r.include_in_handicap is False
    assert r.adj_score == 54


@pytest.mark.parametrize(
    "overrides",
    [{"holes": "10"}, {"holes": ""}, {"score": "abc"}, {"date": "01/05/2024"},
     {"courseType": "links"}, {"id": ""}],
)
def test_bad_rows_are_rejected_not_zeroed(overrides):
    with pytest.raises(ValidationError):
        StoredRoundRecord.model_validate(sheet_row(**overrides))


def test_decode_strips_marker_and_holes_cells():
    row = sheet_row(includeInHandicap=" false ", holes=" 9", score="45", par="36",
                    adjScore="90")

    r = StoredRoundRecord.model_validate(row).to_round()

    assert r.include_in_handicap is False
    assert r.holes == 9
