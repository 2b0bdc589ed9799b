"""Command line splitting."""

from __future__ import annotations


def tokenize(line: str) -> list[str]:
    """Split *line* on whitespace, keeping double-quoted runs together.

    Quote characters toggle quoting and are not part of the token, so
    ``save "my file.ini"`` gives ``["save", "my file.ini"]``. Empty tokens
    are never produced.
    """
    args: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
            continue
        if ch.isspace() and not in_quotes:
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        args.append("".join(current))
    return args
