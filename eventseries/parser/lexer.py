"""
Lexical analyzer for duration strings.

Tokenizes duration strings such as ``"5m"``, ``"1h 30m"`` or ``"250ms"``
into a stream of NUMBER and UNIT tokens that can be consumed by the
duration parser.
"""

from __future__ import annotations

import sly


class DurationLexerError(Exception):
    """Exception raised for lexical analysis errors."""
    pass


class DurationLexer(sly.Lexer):
    """
    Lexical analyzer for duration strings.

    Token Types:
        NUMBER  - Non-negative integer amount
        UNIT    - One of ms, s, m, h, d, w
    """

    tokens = {NUMBER, UNIT}

    # Ignored characters
    ignore = " \t"

    # "ms" must come before "m" and "s"
    UNIT = r"ms|s|m|h|d|w"

    @_(r"\d+")
    def NUMBER(self, t):
        t.value = int(t.value)
        return t

    def error(self, t):
        """Handle invalid characters."""
        raise DurationLexerError(
            f"Invalid character '{t.value[0]}' at index {self.index}"
        )
