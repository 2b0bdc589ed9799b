"""INI document model: ordered, case-insensitive sections and keys."""

from __future__ import annotations

import logging
from collections.abc import Iterator, MutableMapping
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import TypeVar

from chardet import detect as guess_codec

logger = logging.getLogger(__name__)

GLOBAL_SECTION = "global"

V = TypeVar("V")


class ErrorKind(Enum):
    FILE_NOT_FOUND = auto()
    SECTION_NOT_FOUND = auto()
    KEY_NOT_FOUND = auto()
    DUPLICATE_SECTION = auto()
    DUPLICATE_KEY = auto()
    NO_FILE_PATH_SPECIFIED = auto()
    INVALID_USAGE = auto()
    UNKNOWN_COMMAND = auto()
    IO_ERROR = auto()


@dataclass(frozen=True)
class DocError:
    """A failed operation: what went wrong and a one-line message for the user."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


class FoldedDict(MutableMapping[str, V]):
    """Insertion-ordered dict with case-insensitive string keys.

    The casing a key was first stored with is kept; overwriting an existing
    key only replaces the value and leaves its position alone.
    """

    def __init__(self) -> None:
        # folded key -> (stored key, value)
        self._data: dict[str, tuple[str, V]] = {}

    def __getitem__(self, key: str) -> V:
        return self._data[key.casefold()][1]

    def __setitem__(self, key: str, value: V) -> None:
        folded = key.casefold()
        if folded in self._data:
            key = self._data[folded][0]
        self._data[folded] = (key, value)

    def __delitem__(self, key: str) -> None:
        del self._data[key.casefold()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return (stored for stored, _ in self._data.values())

    def __repr__(self) -> str:
        return repr(dict(self.items()))

    def canonical(self, key: str) -> str:
        """Return *key* with the casing it was first stored with."""
        return self._data[key.casefold()][0]


Section = FoldedDict[str]


class IniDocument:
    """An INI file held in memory.

    Keys found before the first ``[header]`` live in the reserved ``global``
    section, which always exists and is written first, without a header.

    Every mutation returns ``None`` on success or a :class:`DocError`.
    """

    def __init__(self) -> None:
        self._sections: FoldedDict[Section] = FoldedDict()
        self._sections[GLOBAL_SECTION] = FoldedDict()
        self.current_file_path: str | None = None

    # -- Reading -----------------------------------------------------------

    def sections(self) -> list[str]:
        return list(self._sections)

    def has_section(self, name: str) -> bool:
        return name in self._sections

    def section(self, name: str) -> Section:
        return self._sections[name]

    def get(self, section: str, key: str) -> str | None:
        if section not in self._sections:
            return None
        return self._sections[section].get(key)

    def items(self) -> Iterator[tuple[str, Section]]:
        return iter(self._sections.items())

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Plain nested dict copy, in stored order."""
        return {name: dict(pairs.items()) for name, pairs in self._sections.items()}

    # -- Parsing / serialization -------------------------------------------

    def loads(self, text: str) -> None:
        """Replace the content with the INI *text*.

        Lines that are neither a header, a ``key = value`` pair nor a comment
        are dropped silently.
        """
        self._sections = FoldedDict()
        self._sections[GLOBAL_SECTION] = FoldedDict()
        current = self._sections[GLOBAL_SECTION]
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line[0] in ";#":
                continue
            if line.startswith("[") and line.endswith("]"):
                name = line[1:-1].strip()
                if name not in self._sections:
                    self._sections[name] = FoldedDict()
                current = self._sections[name]
            elif "=" in line:
                key, value = line.split("=", 1)
                current[key.strip()] = value.strip()

    def dumps(self) -> str:
        out: list[str] = []
        head = self._sections.get(GLOBAL_SECTION)
        if head:
            out.extend(f"{k} = {v}" for k, v in head.items())
            out.append("")
        for name, pairs in self._sections.items():
            if name.casefold() == GLOBAL_SECTION:
                continue
            out.append(f"[{name}]")
            out.extend(f"{k} = {v}" for k, v in pairs.items())
            out.append("")
        return "".join(line + "\n" for line in out)

    @staticmethod
    def _decode(raw: bytes) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            pass
        codec = guess_codec(raw)
        encoding = codec.get("encoding") if codec else None
        if not encoding or (codec.get("confidence") or 0) < 0.5:
            encoding = "latin-1"
        logger.info("decoding as %s", encoding)
        return raw.decode(encoding, errors="replace")

    def load(self, path: str) -> DocError | None:
        target = Path(path)
        if not target.is_file():
            return DocError(ErrorKind.FILE_NOT_FOUND, f"File does not exist: {path}")
        try:
            raw = target.read_bytes()
        except OSError as exc:
            logger.warning("cannot read %s: %s", path, exc)
            return DocError(ErrorKind.IO_ERROR, f"Cannot read {path}: {exc}")
        self.loads(self._decode(raw))
        self.current_file_path = path
        logger.info("loaded %s (%d sections)", path, len(self._sections))
        return None

    def save(self, path: str) -> DocError | None:
        try:
            Path(path).write_text(self.dumps(), encoding="utf-8")
        except OSError as exc:
            logger.warning("cannot write %s: %s", path, exc)
            return DocError(ErrorKind.IO_ERROR, f"Save failed: {exc}")
        logger.info("saved %s", path)
        return None

    # -- Mutations ---------------------------------------------------------

    def _missing_section(self, name: str) -> DocError:
        return DocError(ErrorKind.SECTION_NOT_FOUND, f"Section '{name}' not found.")

    @staticmethod
    def _check_key(key: str) -> DocError | None:
        # must read back as the same key after a save
        if not key or key[0] in ";#[" or "=" in key:
            return DocError(ErrorKind.INVALID_USAGE, f"Invalid key name '{key}'.")
        return None

    def set_value(self, section: str, key: str, value: str) -> DocError | None:
        """Set *key* in *section*, creating the key if needed."""
        key = key.strip()
        if section not in self._sections:
            return self._missing_section(section)
        pairs = self._sections[section]
        if key not in pairs:
            err = self._check_key(key)
            if err is not None:
                return err
        pairs[key] = value.strip()
        return None

    def add_section(self, name: str) -> DocError | None:
        name = name.strip()
        if not name:
            return DocError(ErrorKind.INVALID_USAGE, "Section name cannot be empty.")
        if name in self._sections:
            return DocError(
                ErrorKind.DUPLICATE_SECTION, f"Section '{name}' already exists."
            )
        self._sections[name] = FoldedDict()
        return None

    def add_key(self, section: str, key: str, value: str) -> DocError | None:
        key = key.strip()
        if section not in self._sections:
            return self._missing_section(section)
        err = self._check_key(key)
        if err is not None:
            return err
        pairs = self._sections[section]
        if key in pairs:
            return DocError(
                ErrorKind.DUPLICATE_KEY,
                f"Key '{key}' already exists in section '{section}'.",
            )
        pairs[key] = value.strip()
        return None

    def remove_key(self, section: str, key: str) -> DocError | None:
        if section not in self._sections:
            return self._missing_section(section)
        pairs = self._sections[section]
        if key not in pairs:
            return DocError(
                ErrorKind.KEY_NOT_FOUND,
                f"Key '{key}' not found in section '{section}'.",
            )
        del pairs[key]
        return None

    def remove_section(self, name: str) -> DocError | None:
        if name not in self._sections:
            return self._missing_section(name)
        del self._sections[name]
        return None

    # -- Display -----------------------------------------------------------

    def render_lines(self) -> list[str]:
        """Display lines for the line editor."""
        lines: list[str] = []
        for name, pairs in self._sections.items():
            lines.append(f"[{name}]")
            lines.extend(f"  {k} = {v}" for k, v in pairs.items())
            lines.append("")
        return lines
