"""
Text normalization for untrusted content.

Sanitization only cleans, it never rejects: every function here returns
a normalized value and applying it twice gives the same result as
applying it once.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
BLANK_RUN_RE = re.compile(r"\n{3,}")
KIND_STRIP_RE = re.compile(r"[^a-z0-9]")
TYPE_STRIP_RE = re.compile(r"[^A-Za-z0-9_]")

# Horizontal whitespace only, so markers never swallow the next line
HEADING_RE = re.compile(r"^([^\S\n]*#{1,6})[^\S\n]+", re.MULTILINE)
BULLET_RE = re.compile(r"^([^\S\n]*[-*+])[^\S\n]+", re.MULTILINE)
ORDERED_RE = re.compile(r"^([^\S\n]*\d+\.)[^\S\n]+", re.MULTILINE)


def strip_control_chars(text: str) -> str:
    """Remove null bytes and ASCII control characters except tab, LF and CR."""
    return CONTROL_CHARS_RE.sub("", text)


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def collapse_blank_lines(text: str) -> str:
    """Limit runs of newlines to a single blank line."""
    return BLANK_RUN_RE.sub("\n\n", text)


def rtrim_lines(text: str) -> str:
    return "\n".join(line.rstrip() for line in text.split("\n"))


def normalize_kind(kind: str) -> str:
    return KIND_STRIP_RE.sub("", kind.strip().lower())


def normalize_type(value: str) -> str:
    return TYPE_STRIP_RE.sub("", value.strip())


def sanitize_text(text: str) -> str:
    """Clean a free-text field such as a title or summary."""
    text = strip_control_chars(text)
    text = normalize_line_endings(text)
    text = collapse_blank_lines(text)
    return text.strip()


def sanitize_markdown(source: str) -> str:
    """
    Normalize markdown source.

    Steps, in order:
    - strip null bytes and control characters
    - CRLF / CR to LF
    - right-trim every line
    - collapse 3+ newlines to 2
    - single space after heading markers and list markers
    - trim the whole document
    """
    source = strip_control_chars(source)
    source = normalize_line_endings(source)
    source = rtrim_lines(source)
    source = collapse_blank_lines(source)
    source = HEADING_RE.sub(r"\1 ", source)
    source = BULLET_RE.sub(r"\1 ", source)
    source = ORDERED_RE.sub(r"\1 ", source)
    return source.strip()


class MarkdownBlockSanitizer:
    """Sanitizer strategy for ``markdown`` blocks."""

    block_kind = "markdown"

    def supports(self, kind: str) -> bool:
        return kind == self.block_kind

    def sanitize(self, block_data: Mapping[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}

        kind = block_data.get("kind")
        if isinstance(kind, str):
            sanitized["kind"] = normalize_kind(kind)

        source = block_data.get("source")
        if isinstance(source, str):
            sanitized["source"] = sanitize_markdown(source)

        # Other fields pass through untouched; non-string kind/source are
        # left for the validator to report.
        for key, value in block_data.items():
            sanitized.setdefault(key, value)

        return sanitized
