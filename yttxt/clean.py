"""
yttxt.clean - Transcript cleanup before delivery.

Strips bracketed timestamp/speaker annotations and filler tokens, tidies the
separators they leave behind, and collapses consecutive duplicate lines
(whisper tends to repeat itself on silence). The rules come from
CleanupRules so they can be reviewed and changed per language.
"""

from __future__ import annotations

import re
from re import Pattern

from yttxt.config import CleanupRules
from yttxt.exceptions import CleanupError

WHITESPACE_RE = re.compile(r"\s+")
SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([,，、.。!?！？;；:：])")
REPEATED_SEP_RE = re.compile(r"([,，、])[,，、]+")
LEADING_SEP_RE = re.compile(r"^[\s,，、.。;；:：]+")


def compile_rules(rules: CleanupRules) -> tuple[list[Pattern], list[Pattern]]:
    """Compile annotation and filler patterns.

    ASCII fillers match whole words, case-insensitively; other fillers
    (e.g. CJK interjections, which have no word boundaries) match literally.
    """
    try:
        annotations = [re.compile(p) for p in rules.annotation_patterns]
    except re.error as e:
        raise CleanupError(f"Invalid annotation pattern: {e}") from e

    fillers = []
    for token in rules.filler_tokens:
        if token.isascii():
            fillers.append(re.compile(rf"\b{re.escape(token)}\b", re.IGNORECASE))
        else:
            fillers.append(re.compile(re.escape(token)))
    return annotations, fillers


def clean_line(line: str, annotations: list[Pattern], fillers: list[Pattern]) -> str:
    for pattern in annotations:
        line = pattern.sub("", line)
    for pattern in fillers:
        line = pattern.sub("", line)

    line = WHITESPACE_RE.sub(" ", line)
    line = SPACE_BEFORE_PUNCT_RE.sub(r"\1", line)
    line = REPEATED_SEP_RE.sub(r"\1", line)
    line = LEADING_SEP_RE.sub("", line)
    return line.strip()


def collapse_duplicate_lines(lines: list[str]) -> list[str]:
    """Drop lines identical to the line before them."""
    collapsed: list[str] = []
    for line in lines:
        if collapsed and collapsed[-1] == line:
            continue
        collapsed.append(line)
    return collapsed


def _clean_once(text: str, rules: CleanupRules, compiled: tuple[list[Pattern], list[Pattern]]) -> str:
    annotations, fillers = compiled
    lines = [clean_line(line, annotations, fillers) for line in text.splitlines()]
    lines = [line for line in lines if line]
    if rules.collapse_duplicates:
        lines = collapse_duplicate_lines(lines)
    return "\n".join(lines) + "\n" if lines else ""


def clean_transcript(text: str, rules: CleanupRules | None = None) -> str:
    """Apply the cleanup rules until the text stops changing.

    The result is a fixed point of the rules, so cleaning an already cleaned
    transcript returns it unchanged.

    Args:
        text: Raw transcript text
        rules: Cleanup rules (defaults to CleanupRules())

    Returns:
        Cleaned text, newline-terminated, or "" if nothing survives
    """
    rules = rules or CleanupRules()
    compiled = compile_rules(rules)

    # Every rule only deletes or narrows text, so this terminates.
    while True:
        cleaned = _clean_once(text, rules, compiled)
        if cleaned == text:
            return cleaned
        text = cleaned
