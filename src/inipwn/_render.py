"""Rendered and tagged display lines, plus line colouring."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from rich.text import Text

from inipwn.document import IniDocument


class LineKind(Enum):
    SECTION = auto()
    KEY_VALUE = auto()
    BLANK = auto()


@dataclass(frozen=True)
class TaggedLine:
    """A display line that remembers which section/key it came from."""

    text: str
    kind: LineKind
    section: str | None = None
    key: str | None = None


def build_tagged_lines(document: IniDocument) -> list[TaggedLine]:
    """Project *document* into tagged lines, in stored order."""
    lines: list[TaggedLine] = []
    for name, pairs in document.items():
        lines.append(TaggedLine(f"[{name}]", LineKind.SECTION, section=name))
        for key, value in pairs.items():
            lines.append(
                TaggedLine(f"  {key} = {value}", LineKind.KEY_VALUE, name, key)
            )
        lines.append(TaggedLine("", LineKind.BLANK))
    return lines


_SECTION_STYLE = "yellow"
_KEY_STYLE = "green"
_EQUALS_STYLE = "white"
_VALUE_STYLE = "cyan"
_SELECTED_STYLE = "bold white on dark_blue"


def colorize(line: str, selected: bool = False) -> Text:
    """Syntax-highlight one display line.

    A selected line is drawn white on a dark blue background.
    """
    if selected:
        return Text(line, style=_SELECTED_STYLE, no_wrap=True)
    text = Text(no_wrap=True)
    if line.startswith("[") and line.endswith("]"):
        text.append(line, style=_SECTION_STYLE)
    elif " = " in line:
        key, value = line.split(" = ", 1)
        text.append(key, style=_KEY_STYLE)
        text.append(" = ", style=_EQUALS_STYLE)
        text.append(value, style=_VALUE_STYLE)
    else:
        text.append(line)
    return text
