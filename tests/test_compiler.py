"""Tests for compiling filter strings into predicates."""
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from odataquery.errors import FilterParseError, InvalidPropertyError
from odataquery.fields import fields_of
from odataquery.filters import FilterBuilder, FilterRequest, Operation
from odataquery.query import compile_filter

from tests.records import Invoice, Label, Timesheet, sample_timesheets

F = fields_of(Timesheet)


def ids(text):
    predicate = compile_filter(text, Timesheet)
    return [t.Id for t in sample_timesheets() if predicate(t)]


class TestComparisons:
    @pytest.mark.parametrize(
        "operation, expected",
        [
            (Operation.EQUALS, True),
            (Operation.NOT_EQUAL_TO, False),
            (Operation.GREATER_THAN, False),
            (Operation.LESS_THAN, False),
            (Operation.GREATER_THAN_OR_EQUAL_TO, True),
            (Operation.LESS_THAN_OR_EQUAL_TO, True),
        ],
    )
    def test_builder_output_compiles(self, operation, expected):
        text = FilterBuilder().where(F.Hours, operation, 5).build().filter
        predicate = compile_filter(text, Timesheet)
        assert predicate(Timesheet(Id=1, EmployeeId=1, Hours=5)) is expected

    def test_symbol_operators(self):
        assert ids("Hours >= 6") == [1, 4]
        assert ids("Hours != 8 and Hours < 3") == [3, 5]

    def test_keywords_case_insensitive(self):
        assert ids("Id EQ 1 OR Id eq 2") == [1, 2]
        assert ids("Id Ge 4") == [4, 5]

    def test_contains_is_not_an_infix_operator(self):
        with pytest.raises(FilterParseError):
            compile_filter("Comment contains 'late'", Timesheet)

    def test_and_binds_tighter_than_or(self):
        assert ids("Id eq 1 or Id eq 2 and Hours gt 100") == [1]
        assert ids("(Id eq 1 or Id eq 2) and Hours gt 100") == []

    def test_string_with_apostrophe(self):
        text = FilterBuilder().where(F.Comment, Operation.EQUALS, "don't bill").build().filter
        assert ids(text) == [2]

    def test_boolean_member_alone(self):
        assert ids("Approved") == [1, 4]
        assert ids("Approved eq false and Deleted eq true") == [3]

    def test_null(self):
        assert ids("Comment eq null") == [3]
        assert ids("Comment ne null") == [1, 2, 4, 5]

    def test_enum_member(self):
        assert ids("State eq 'Closed'") == [1]

    def test_root_parameter_prefix(self):
        assert ids("entity.Id eq 4") == [4]


class TestDates:
    def test_builder_datetime(self):
        text = FilterBuilder().where(F.StartTime, Operation.GREATER_THAN, datetime(2015, 3, 14, 12, 0, 0)).build().filter
        assert ids(text) == [2, 4]

    def test_offset_literal(self):
        # 2015-03-14T11:26:53+02:00 is 09:26:53 UTC
        assert ids("StartTime eq 2015-03-14T11:26:53+02:00") == [1]

    def test_null_never_ordered(self):
        assert 3 not in ids("StartTime lt 2020-01-01T00:00:00Z")

    def test_datetime_call(self):
        assert ids("StartTime lt DateTime(2015, 3, 1)") == [5]

    def test_impossible_date(self):
        with pytest.raises(FilterParseError):
            compile_filter("StartTime gt 2015-13-45T09:26:53", Timesheet)


class TestFunctions:
    def test_contains_on_string(self):
        assert ids("contains(Comment, 'e')") == [1, 4]

    def test_contains_on_collection(self):
        assert ids("contains(Keywords, 'weekend')") == [4]

    def test_any_with_predicate(self):
        assert ids("Tags/any(t:t/Name eq 'urgent')") == [1, 4]

    def test_any_without_predicate(self):
        assert ids("Tags/any()") == [1, 2, 4]

    def test_all_of_empty_is_true(self):
        assert ids("Tags/all(t:t/Weight gt 1)") == [1, 3, 4, 5]

    def test_nested_navigation(self):
        assert ids("Employee/Name eq 'Bob'") == [1, 3]
        assert ids("Employee/Skills/any(s:s/Name eq 'python')") == [1, 3]

    def test_contains_inside_lambda(self):
        assert ids("Tags/any(t:t/Weight gt 2 and contains(t/Name, 'over'))") == [4]


class TestErrors:
    def test_unknown_member(self):
        with pytest.raises(InvalidPropertyError) as exc:
            compile_filter("Nope eq 1", Timesheet)
        assert exc.value.token == "Nope"
        assert isinstance(exc.value, FilterParseError)

    def test_unknown_member_in_lambda(self):
        with pytest.raises(InvalidPropertyError) as exc:
            compile_filter("Tags/any(t:t/Nope eq 1)", Timesheet)
        assert exc.value.entity_type_name == "Label"

    def test_members_of_collections_need_a_quantifier(self):
        with pytest.raises(FilterParseError):
            compile_filter("Tags/Name eq 'a'", Timesheet)

    def test_non_boolean_filter(self):
        with pytest.raises(FilterParseError):
            compile_filter("Hours", Timesheet)

    def test_type_mismatch(self):
        with pytest.raises(FilterParseError):
            compile_filter("Hours eq 'abc'", Timesheet)

    def test_unexpected_token(self):
        with pytest.raises(FilterParseError) as exc:
            compile_filter("Id eq 1 Id", Timesheet)
        assert exc.value.token == "Id"

    def test_unterminated_literal(self):
        with pytest.raises(FilterParseError):
            compile_filter("Comment eq 'abc", Timesheet)

    def test_all_requires_predicate(self):
        with pytest.raises(FilterParseError):
            compile_filter("Tags/all()", Timesheet)

    def test_mismatched_lambda_variable(self):
        with pytest.raises(FilterParseError):
            compile_filter("Tags/any(t:u/Name eq 'a')", Timesheet)


class TestCompileFilter:
    def test_blank_is_none(self):
        assert compile_filter(None, Timesheet) is None
        assert compile_filter("   ", Timesheet) is None

    def test_untyped_entities(self):
        predicate = compile_filter("Name eq 'a' and Size gt 2", Any)
        assert predicate({"Name": "a", "Size": 3})
        assert not predicate({"Name": "a"})

    def test_rendering(self):
        assert str(compile_filter("Id eq 1", Timesheet)) == "entity => (entity.Id == 1)"

    def test_pydantic_records(self):
        predicate = compile_filter("Total gt 10 and contains(Lines, 'tax')", Invoice)
        assert predicate(Invoice(Id=1, Total=12.5, Lines=["net", "tax"]))
        assert not predicate(Invoice(Id=2, Total=12.5))
        with pytest.raises(InvalidPropertyError):
            compile_filter("Amount gt 10", Invoice)

    def test_predicate_on_nested_record(self):
        predicate = compile_filter("Name eq 'x' and Weight ge 2", Label)
        assert predicate(Label("x", 2))
        assert not predicate(Label("x", 1))


class TestQueryStringRoundTrip:
    """Builder output read back through from_query_string still compiles."""

    def test_offset_datetime(self):
        moment = datetime(2015, 3, 14, 11, 26, 53, tzinfo=timezone(timedelta(hours=2)))
        query = FilterBuilder().where(F.StartTime, Operation.EQUALS, moment).build_query_string()
        request = FilterRequest.from_query_string(query)
        assert request.filter == "(StartTime eq 2015-03-14T11:26:53.0000000+02:00)"
        assert ids(request.filter) == [1]

    def test_reserved_characters_in_strings(self):
        comment = "C++ & R&D #1 at 100%"
        query = (
            FilterBuilder()
            .where(F.Comment, Operation.EQUALS, comment)
            .order_by(F.Id)
            .take(5)
            .build_query_string()
        )
        request = FilterRequest.from_query_string(query)
        assert request.filter == "(Comment eq 'C++ & R&D #1 at 100%')"
        assert request.order_by == "Id"
        assert request.take == 5
        predicate = compile_filter(request.filter, Timesheet)
        assert predicate(Timesheet(Id=9, EmployeeId=1, Comment=comment))
        assert not predicate(Timesheet(Id=9, EmployeeId=1, Comment="C  & R"))

    def test_readable_characters_left_alone(self):
        query = FilterBuilder().where(F.Employee.Name, Operation.EQUALS, "Bob").build_query_string()
        assert query == "?$filter=(Employee.Name eq 'Bob')"
