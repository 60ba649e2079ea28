"""
Parser for duration strings.

Implements a small grammar that turns a sequence of ``NUMBER UNIT``
terms into a total length in milliseconds.
"""

from __future__ import annotations

import sly

from eventseries.parser.lexer import DurationLexer

UNIT_MS = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
}


class DurationParseError(Exception):
    """Exception raised for parsing errors."""

    pass


class _SLYParser(sly.Parser):
    """
    SLY-based parser for duration strings.

    Grammar:
        duration : duration term
                 | term
        term     : NUMBER UNIT
    """

    tokens = DurationLexer.tokens

    @_("duration term")
    def duration(self, p):
        return p.duration + p.term

    @_("term")
    def duration(self, p):
        return p.term

    @_("NUMBER UNIT")
    def term(self, p):
        return p.NUMBER * UNIT_MS[p.UNIT]

    def error(self, token):
        if token:
            raise DurationParseError(
                f"Syntax error at '{token.value}' (type: {token.type}, index: {token.index})"
            )
        raise DurationParseError("Syntax error: unexpected end of duration")


class DurationParser:
    """
    Parser for duration strings.

    Wraps the SLY-based parser with a clean public interface.
    """

    def __init__(self) -> None:
        self._lexer = DurationLexer()
        self._parser = _SLYParser()

    def parse(self, text: str) -> int:
        """
        Parse a duration string into milliseconds.

        Args:
            text: The duration string to parse, e.g. ``"1h30m"``.

        Returns:
            The total duration in milliseconds.

        Raises:
            DurationParseError: If the string is syntactically invalid.
            DurationLexerError: If the string contains invalid characters.
        """
        text = text.strip()
        if not text:
            raise DurationParseError("Syntax error: empty duration")

        result = self._parser.parse(self._lexer.tokenize(text))
        if result is None:
            raise DurationParseError("Syntax error: could not parse duration")
        return result
