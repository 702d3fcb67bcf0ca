"""Shared utility functions for Plainly."""

import re


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapping JSON from LLM responses."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)
    return text.strip()


def strip_wrapping_quotes(text: str) -> str:
    """Remove one leading and one trailing quote character, if present."""
    return re.sub(r"""^["']|["']$""", "", text.strip()).strip()


def normalize_for_match(text: str) -> str:
    """Lowercase, drop punctuation and collapse whitespace for loose comparison."""
    return " ".join(re.sub(r"[^\w\s]", "", text.lower()).split())
