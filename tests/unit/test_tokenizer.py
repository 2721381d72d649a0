"""Unit tests for query tokenization."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tasksearch.tokenizer import parse_query

words = st.text(alphabet=st.characters(exclude_characters=' "', exclude_categories=("Cs",)), min_size=1)


@pytest.mark.unit
class TestParseQuery:
    """Test parse_query."""

    def test_quoted_phrase_is_one_token(self):
        """Test quoted phrase is one token."""
        assert parse_query('urgent "fix bug" now') == ["urgent", "fix bug", "now"]

    def test_empty_query(self):
        """Test empty query."""
        assert parse_query("") == []

    def test_repeated_spaces_produce_no_empty_tokens(self):
        """Test repeated spaces produce no empty tokens."""
        assert parse_query("  a  ") == ["a"]
        assert parse_query("a    b") == ["a", "b"]

    def test_only_spaces(self):
        """Test only spaces."""
        assert parse_query("     ") == []

    def test_empty_quotes_are_dropped(self):
        """Test empty quotes are dropped."""
        assert parse_query('a "" b') == ["a", "b"]

    def test_unbalanced_quote_runs_to_end(self):
        """Test unbalanced quote runs to end."""
        assert parse_query('fix "login bug today') == ["fix", "login bug today"]

    def test_quote_inside_word_glues_text(self):
        """Test quote inside word glues text."""
        assert parse_query('ab"c d"e') == ["abc de"]

    def test_tabs_are_not_separators(self):
        """Test tabs are not separators."""
        assert parse_query("a\tb") == ["a\tb"]

    @given(st.lists(words, min_size=0, max_size=8))
    def test_single_space_join_round_trips(self, tokens):
        """Property: joining quote-free words with one space yields the same words."""
        assert parse_query(" ".join(tokens)) == tokens

    @given(st.lists(words, min_size=1, max_size=5), st.lists(words, min_size=1, max_size=5))
    def test_quoted_span_is_single_token(self, before, phrase):
        """Test quoted span is single token."""
        query = " ".join(before) + ' "' + " ".join(phrase) + '"'
        assert parse_query(query) == [*before, " ".join(phrase)]

    @given(st.text())
    def test_tokens_never_empty_and_never_contain_quotes(self, query):
        """Test tokens never empty and never contain quotes."""
        for token in parse_query(query):
            assert token
            assert '"' not in token
