"""Tests for the filter rewriting stages."""
from datetime import datetime

import pytest

from odataquery.errors import FilterParseError
from odataquery.filters import format_literal
from odataquery.query import convert_datetimes, normalize_strings, rewrite, rewrite_functions, tokenize
from odataquery.query.lexer import render


class TestLexer:
    @pytest.mark.parametrize(
        "text",
        [
            "Id eq 1",
            "contains(Comment,   'a b')  or  Tags/any(t:t/Name eq 'x')",
            "O'Brien eq 'don''t'",
            "  \t",
        ],
    )
    def test_tokens_render_back_to_input(self, text):
        assert render(tokenize(text)) == text


class TestNormalizeStrings:
    def test_empty_literal(self):
        assert normalize_strings("contains(Text, '')") == 'contains(Text, "")'

    def test_escaped_apostrophe(self):
        assert normalize_strings("contains(Text, 'don''')") == 'contains(Text, "don\'")'

    def test_embedded_apostrophes(self):
        assert normalize_strings("Text eq 'don't we'll'") == 'Text eq "don\'t we\'ll"'

    def test_double_quotes_are_escaped(self):
        assert normalize_strings("Text eq 'say \"hi\"'") == 'Text eq "say \\"hi\\""'

    def test_apostrophe_inside_word_is_not_a_literal(self):
        assert normalize_strings("O'Brien eq 1") == "O'Brien eq 1"

    def test_several_literals(self):
        assert normalize_strings("A eq 'x' or B eq 'y'") == 'A eq "x" or B eq "y"'

    def test_unterminated(self):
        with pytest.raises(FilterParseError):
            normalize_strings("Text eq 'abc")


class TestConvertDatetimes:
    def test_round_trip_format(self):
        literal = format_literal(datetime(2015, 3, 14, 9, 26, 53))
        assert literal == "2015-03-14T09:26:53.0000000"
        assert convert_datetimes(literal) == "DateTime(2015, 03, 14, 09, 26, 53)"

    def test_in_expression(self):
        assert (
            convert_datetimes("StartTime gt 2015-03-14T09:26:53Z")
            == "StartTime gt DateTime(2015, 03, 14, 09, 26, 53)"
        )

    def test_offset_adjusted_to_utc(self):
        assert convert_datetimes("2015-03-14T09:26:53+02:00") == "DateTime(2015, 03, 14, 07, 26, 53)"
        assert convert_datetimes("2015-03-14T23:30:00-01:00") == "DateTime(2015, 03, 15, 00, 30, 00)"

    def test_strings_are_left_alone(self):
        text = "Comment eq '2015-03-14T09:26:53'"
        assert convert_datetimes(text) == text

    def test_impossible_date_left_alone(self):
        assert convert_datetimes("2015-13-45T09:26:53") == "2015-13-45T09:26:53"


class TestRewriteFunctions:
    def test_contains(self):
        assert rewrite_functions('contains(Comment, "late")') == 'Comment.Contains("late")'

    def test_contains_drops_whitespace(self):
        assert rewrite_functions('CONTAINS(Comment,    "late")') == 'Comment.Contains("late")'

    def test_any(self):
        assert rewrite_functions('Tags/any(t:t/Name eq "a")') == 'Tags.any(x => x.Name eq "a")'

    def test_all(self):
        assert rewrite_functions("Tags/all(t:t/Weight gt 1)") == "Tags.all(x => x.Weight gt 1)"

    def test_empty_any(self):
        assert rewrite_functions("Tags/any()") == "Tags.any()"

    def test_every_bound_reference(self):
        assert (
            rewrite_functions('Tags/any(t:t/Name eq "a" or t/Weight gt 2)')
            == 'Tags.any(x => x.Name eq "a" or x.Weight gt 2)'
        )

    def test_contains_inside_lambda(self):
        assert (
            rewrite_functions('Tags/any(t:t/Weight gt 1 and contains(t/Name, "b"))')
            == 'Tags.any(x => x.Weight gt 1 and x.Name.Contains("b"))'
        )

    def test_navigation_path(self):
        assert rewrite_functions('Employee/Name eq "Bob"') == 'Employee.Name eq "Bob"'

    def test_mismatched_variable_not_rewritten(self):
        assert "/any(" in rewrite_functions('Tags/any(t:u/Name eq "a")')


class TestPipeline:
    def test_all_stages(self):
        assert (
            rewrite("contains(Comment, 'late') and StartTime gt 2015-03-14T09:26:53Z")
            == 'Comment.Contains("late") and StartTime gt DateTime(2015, 03, 14, 09, 26, 53)'
        )

    def test_quantifier_with_single_quotes(self):
        assert rewrite("Tags/any(t:t/Name eq 'urgent')") == 'Tags.any(x => x.Name eq "urgent")'
