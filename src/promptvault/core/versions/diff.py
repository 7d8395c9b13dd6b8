"""Word-level diff between a snapshot's content and the live content.

The text is split into alternating word and whitespace tokens and the two
token sequences are aligned with :class:`difflib.SequenceMatcher`
(``autojunk`` off, so long prompts with repeated words are not mangled).
Each opcode becomes one or two spans:

- ``equal``   -> ``unchanged``
- ``delete``  -> ``removed``
- ``insert``  -> ``added``
- ``replace`` -> ``removed`` then ``added``

Whitespace is kept as tokens, so joining the ``unchanged`` and ``removed``
spans gives back the old text exactly, and joining ``unchanged`` and
``added`` gives back the new text. Adjacent spans with the same tag are
coalesced.

Rendering spans (colors, strike-through) is the caller's business.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Literal

SpanTag = Literal["unchanged", "added", "removed"]

_TOKEN_RE = re.compile(r"\s+|\S+")


@dataclass(frozen=True, slots=True)
class DiffSpan:
    """A run of text tagged with how it changed."""

    tag: SpanTag
    text: str


def tokenize(text: str) -> list[str]:
    """Split ``text`` into word and whitespace tokens (lossless)."""
    return _TOKEN_RE.findall(text)


def diff(old: str, new: str) -> list[DiffSpan]:
    """Return the tagged spans turning ``old`` into ``new``."""
    a, b = tokenize(old), tokenize(new)
    matcher = SequenceMatcher(None, a, b, autojunk=False)

    spans: list[DiffSpan] = []
    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        if op == "equal":
            _append(spans, "unchanged", a[i1:i2])
            continue
        if op in ("delete", "replace"):
            _append(spans, "removed", a[i1:i2])
        if op in ("insert", "replace"):
            _append(spans, "added", b[j1:j2])
    return spans


def _append(spans: list[DiffSpan], tag: SpanTag, tokens: list[str]) -> None:
    text = "".join(tokens)
    if not text:
        return
    if spans and spans[-1].tag == tag:
        spans[-1] = DiffSpan(tag, spans[-1].text + text)
    else:
        spans.append(DiffSpan(tag, text))


def has_changes(spans: list[DiffSpan]) -> bool:
    """True when any span is ``added`` or ``removed``."""
    return any(span.tag != "unchanged" for span in spans)


def side(spans: list[DiffSpan], which: Literal["old", "new"]) -> str:
    """Reassemble the old or new text from ``spans``."""
    skip: SpanTag = "added" if which == "old" else "removed"
    return "".join(span.text for span in spans if span.tag != skip)


__all__ = ["DiffSpan", "SpanTag", "diff", "has_changes", "side", "tokenize"]
