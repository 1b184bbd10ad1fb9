"""Human-readable and JSON token dumps."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import Any, TextIO

from dtdx.tokens import Token, TokenNames


def dump_tokens(
    tokens: Iterable[Token],
    names: TokenNames | None = None,
    *,
    positions: bool = False,
    file: TextIO = sys.stderr,
) -> None:
    """Print one ``{typeName, "value"}`` line per token to *file*."""
    for tok in tokens:
        if positions and tok.span is not None:
            start = tok.span.start
            file.write(f"{start.line}:{start.column}\t")
        file.write(tok.format(names))
        file.write("\n")


def token_records(tokens: Iterable[Token], names: TokenNames | None = None) -> list[dict[str, Any]]:
    """Return JSON-ready dicts for *tokens*."""
    records = []
    for tok in tokens:
        record: dict[str, Any] = {
            "type": int(tok.type),
            "name": names.name(tok.type) if names is not None else None,
            "value": tok.value,
        }
        if tok.span is not None:
            record["line"] = tok.span.start.line
            record["column"] = tok.span.start.column
        records.append(record)
    return records
