"""Tests for field segmentation and component classification."""

import pytest

from wplink.segment import (
    classify_component,
    extract_years,
    is_date_range,
    locate_years,
    segment_field,
    split_subject,
)
from wplink.types import FieldText


def _leaf_roles(components):
    return [(c.role, c.text) for comp in components for c in comp.leaves()]


class TestSplitSubject:
    def test_splits_on_double_dash(self):
        pieces, seps = split_subject("World War, 1939-1945 -- Campaigns")
        assert pieces == ["World War, 1939-1945", "Campaigns"]
        assert seps == [" -- "]

    @pytest.mark.parametrize(
        "text",
        [
            "Physics -- History -- 20th century",
            "Jazz  --\tDiscography --  Catalogs",
            "No separator here",
            "Hyphenated--word -- Other",
        ],
    )
    def test_pieces_and_separators_cover_text(self, text):
        pieces, seps = split_subject(text)
        rebuilt = pieces[0] + "".join(sep + piece for sep, piece in zip(seps, pieces[1:]))
        assert rebuilt == text

    def test_dash_without_whitespace_is_not_a_separator(self):
        pieces, _ = split_subject("Hyphenated--word")
        assert pieces == ["Hyphenated--word"]


class TestYears:
    def test_extract_years(self):
        assert extract_years("1942-1945") == ["1942", "1945"]

    def test_extract_open_range(self):
        assert extract_years("ca. 1900-") == ["1900"]

    def test_locate_years_in_order(self):
        assert locate_years("1942-1945") == [("1942", 0), ("1945", 5)]

    def test_repeated_year_is_not_reused(self):
        assert locate_years("1900-1900") == [("1900", 0), ("1900", 5)]

    def test_no_years(self):
        assert locate_years("12.3") == []

    def test_date_range_detection(self):
        assert is_date_range("1939-1945")
        assert is_date_range("1867–1934")
        assert is_date_range("1990/91")
        assert not is_date_range("Emperor of the French")
        assert not is_date_range("1900s")


class TestClassifyComponent:
    def test_parenthetical_acronym(self):
        comp = classify_component("Napoleon I (Emperor of the French)", 0, "f.0")
        assert comp.role == "Compound"
        main, paren = comp.children
        assert (main.role, main.text) == ("PlainSubject", "Napoleon I")
        assert (paren.role, paren.text) == ("Acronym", "Emperor of the French")
        assert (main.start, main.end) == (0, 10)
        assert (paren.start, paren.end) == (12, 33)

    def test_person_name_with_date_range(self):
        comp = classify_component("Curie, Marie (1867-1934)", 0, "f.0")
        main, paren = comp.children
        assert main.role == "PersonName"
        assert main.name_parts.query == "Marie Curie"
        assert paren.role == "DateRange"
        assert [(y.text, y.start, y.end) for y in paren.children] == [
            ("1867", 14, 18),
            ("1934", 19, 23),
        ]
        assert [y.role for y in paren.children] == ["Year", "Year"]

    def test_date_range_without_years_is_plain_subject(self):
        comp = classify_component("Statute (12.3)", 0, "f.0")
        assert comp.children[1].role == "PlainSubject"

    def test_person_name(self):
        comp = classify_component("Curie, Marie", 0, "f.0")
        assert comp.role == "PersonName"
        assert comp.name_parts.last_name == "Curie"

    def test_digits_make_plain_subject(self):
        comp = classify_component("World War, 1939-1945", 0, "f.0")
        assert comp.role == "PlainSubject"

    def test_nested_parenthetical_gets_second_pass(self):
        comp = classify_component("Paris (France) (1800-1900)", 0, "f.0")
        assert _leaf_roles([comp]) == [
            ("PlainSubject", "Paris"),
            ("Acronym", "France"),
            ("Year", "1800"),
            ("Year", "1900"),
        ]

    def test_inner_parenthetical_falls_back_to_plain_subject(self):
        comp = classify_component("Rome (Italy) in art", 0, "f.0")
        assert comp.role == "PlainSubject"
        assert comp.text == "Rome (Italy) in art"

    def test_ids_follow_structure(self):
        comp = classify_component("Curie, Marie (1867-1934)", 0, "f.0")
        assert [c.id for c in comp.leaves()] == ["f.0.0", "f.0.1.0", "f.0.1.1"]


class TestSegmentField:
    def test_name_field(self):
        components, seps = segment_field(FieldText("Curie, Marie", "name", "n1"))
        assert seps == []
        assert len(components) == 1
        assert components[0].role == "PersonName"
        assert components[0].query == "Marie Curie"
        assert components[0].id == "n1.0"

    def test_name_field_without_comma_is_subject(self):
        components, _ = segment_field(FieldText("Plato", "name"))
        assert components[0].role == "PlainSubject"

    def test_name_field_with_two_commas_is_subject(self):
        components, _ = segment_field(FieldText("Smith, John, 1900-", "name"))
        assert components[0].role == "PlainSubject"

    def test_name_field_allows_digits(self):
        components, _ = segment_field(FieldText("Curie, Marie 1867-1934", "name"))
        assert components[0].role == "PersonName"

    def test_subject_with_two_components(self):
        components, seps = segment_field(
            FieldText("World War, 1939-1945 -- Campaigns", "subject")
        )
        assert seps == [" -- "]
        assert [c.text for c in components] == ["World War, 1939-1945", "Campaigns"]

    def test_spans_index_into_field_text(self):
        text = " Curie, Marie (1867-1934) --  Napoleon I (Emperor of the French) -- Physics "
        field_text = FieldText(text, "subject")
        components, _ = segment_field(field_text)
        for comp in components:
            assert text[comp.start:comp.end] == comp.text
            for leaf in comp.leaves():
                assert text[leaf.start:leaf.end] == leaf.text

    def test_empty_main_text(self):
        components, _ = segment_field(FieldText("(1939-1945)", "subject"))
        main, paren = components[0].children
        assert main.text == ""
        assert paren.role == "DateRange"
