"""Search over rendered lines with cyclic next/previous."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SearchState:
    """Matches of one search session and the current match."""

    term: str
    match_positions: list[int] = field(default_factory=list)
    cursor: int = 0

    @property
    def count(self) -> int:
        return len(self.match_positions)

    @property
    def current(self) -> int | None:
        """Line index of the current match, or None when nothing matched."""
        if not self.match_positions:
            return None
        return self.match_positions[self.cursor]

    def next(self) -> int | None:
        if not self.match_positions:
            return None
        self.cursor = (self.cursor + 1) % self.count
        return self.current

    def previous(self) -> int | None:
        if not self.match_positions:
            return None
        self.cursor = (self.cursor - 1) % self.count
        return self.current

    def position_label(self) -> str:
        return f"{self.cursor + 1} of {self.count}"


def search(lines: list[str], term: str) -> SearchState:
    """Case-insensitive substring search; positions ascend, cursor starts at 0."""
    needle = term.lower()
    positions = [row for row, line in enumerate(lines) if needle in line.lower()]
    return SearchState(term=term, match_positions=positions)
