"""Codec for the workflow flag block stored in a Zotero item's ``extra`` field.

Zotero has no custom fields, so DLAB workflow state lives in a delimited block
inside the free-text ``extra`` field::

    Some note kept by a human.

    [DLAB]
    hal_create: yes
    comms_publish: no
    [/DLAB]

Grammar (version 1):

* the block starts at the first literal ``[DLAB]`` and ends at the first
  literal ``[/DLAB]`` after it (case-sensitive); a close token before the
  open token is plain text, and without a close after the open the field
  has no block;
* each non-empty line inside the block that does not start with ``#`` is a
  ``key: value`` pair split at the first colon; lines without a colon are
  ignored;
* values ``yes``/``true``/``oui`` read as ``yes`` and ``no``/``false``/``non``
  read as ``no`` (case-insensitive); any other value is kept as written.

Text outside the delimiters belongs to the user and is never rewritten.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

BLOCK_OPEN = "[DLAB]"
BLOCK_CLOSE = "[/DLAB]"
FLAG_VALUES = ("yes", "no")
PREFERRED_ORDER = (
    "hal_create",
    "comms_publish",
    "hal_done",
    "comms_done",
    "hal_done_date",
    "comms_done_date",
    "hal_id",
    "comms_link",
)

_TRUTHY = {"yes", "true", "oui"}
_FALSY = {"no", "false", "non"}


class ExtraParts(NamedTuple):
    before: str
    block: str | None
    after: str


def normalize_flag_value(value: str) -> str:
    token = value.strip()
    lowered = token.lower()
    if lowered in _TRUTHY:
        return "yes"
    if lowered in _FALSY:
        return "no"
    return token


def split_extra(extra: str | None) -> ExtraParts:
    """Split ``extra`` around its flag block; ``block`` is None when there is none."""
    text = extra or ""
    start = text.find(BLOCK_OPEN)
    end = text.find(BLOCK_CLOSE, start) if start != -1 else -1
    if end == -1:
        return ExtraParts(text, None, "")
    return ExtraParts(
        before=text[:start],
        block=text[start + len(BLOCK_OPEN) : end],
        after=text[end + len(BLOCK_CLOSE) :],
    )


def parse_block(block: str) -> dict[str, str]:
    flags: dict[str, str] = {}
    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        flags[key] = normalize_flag_value(value)
    return flags


def parse_flags(extra: str | None) -> dict[str, str]:
    """Return the flags stored in ``extra``, or an empty mapping."""
    parts = split_extra(extra)
    if parts.block is None:
        return {}
    return parse_block(parts.block)


def ordered_keys(flags: Mapping[str, str]) -> list[str]:
    """Preferred flags first, then the rest in encounter order."""
    ordered = [key for key in PREFERRED_ORDER if key in flags]
    return ordered + [key for key in flags if key not in PREFERRED_ORDER]


def serialize_block(flags: Mapping[str, str]) -> str:
    lines = [BLOCK_OPEN, *(f"{key}: {flags[key]}" for key in ordered_keys(flags)), BLOCK_CLOSE]
    return "\n".join(lines)


def merge_flags(extra: str | None, updates: Mapping[str, str]) -> str:
    """Overlay ``updates`` onto the flag block of ``extra``.

    Only ``yes``/``no`` values are written; anything else in ``updates`` is
    dropped. The surrounding text is kept as is, separated from the block by
    one blank line.
    """
    parts = split_extra(extra)
    flags = parse_block(parts.block) if parts.block is not None else {}
    for key, value in updates.items():
        if value in FLAG_VALUES:
            flags[key] = value

    sections = []
    before = parts.before.rstrip()
    after = parts.after.lstrip()
    if before:
        sections.append(before)
    sections.append(serialize_block(flags))
    if after:
        sections.append(after)
    return "\n\n".join(sections).strip() + "\n"
