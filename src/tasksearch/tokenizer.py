#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Query tokenizer with quoted-phrase support."""

from __future__ import annotations

from tasksearch.constants import QUOTE_CHAR, TOKEN_SEPARATOR


def parse_query(query: str) -> list[str]:
    """Split ``query`` into search tokens.

    Spaces separate tokens except between quote characters, where they are
    kept literally. Quotes toggle that state and are never emitted, so an
    unbalanced quote makes the rest of the string a single phrase. Empty
    tokens are dropped.

    Examples
    --------
    >>> parse_query('urgent "fix bug" now')
    ['urgent', 'fix bug', 'now']
    >>> parse_query('  a  ')
    ['a']

    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in query:
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
        elif char == TOKEN_SEPARATOR and not in_quotes:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))

    return tokens
