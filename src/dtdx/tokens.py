"""Token values, source positions, and token-type name tables."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

# Reserved token type used to send lexical errors back to the consumer.
ERROR = -1


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


class TokenNames(Mapping[int, str]):
    """Read-only table of display names for one scanner's token types.

    Only used for printing and diagnostics; lexing never consults it.
    """

    def __init__(self, names: Mapping[int, str]) -> None:
        self._names = {ERROR: "ErrorTok", **{int(k): v for k, v in names.items()}}

    def __getitem__(self, tt: int) -> str:
        return self._names[tt]

    def __iter__(self) -> Iterator[int]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def name(self, tt: int) -> str:
        """Return the display name for *tt*, falling back to ``tok_<n>``."""
        return self._names.get(tt, f"tok_{int(tt)}")


@dataclass(frozen=True, slots=True)
class Token:
    """A lexeme: a token type and the slice of source it covers.

    For ERROR tokens the value is the diagnostic message instead.
    The span is informational and does not take part in equality.
    """

    type: int
    value: str
    span: Span | None = field(default=None, compare=False)

    @property
    def is_error(self) -> bool:
        return self.type == ERROR

    def format(self, names: TokenNames | None = None) -> str:
        typ = names.name(self.type) if names is not None else str(int(self.type))
        return f'{{{typ}, "{self.value}"}}'

    def __str__(self) -> str:
        return self.format()
