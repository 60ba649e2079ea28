"""
Duration string parser for eventseries.

Provides lexical analysis and parsing of duration strings such as
``"5m"``, ``"1h30m"`` or ``"250ms"`` into integer milliseconds, used for
alignment periods, windowing and ``Index`` keys.
"""
