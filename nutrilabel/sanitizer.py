"""
sanitizer.py — clean pasted recipe text before it is split into lines.

Pasted recipes arrive with HTML fragments, entities, Unicode fractions, emoji
and invisible characters. sanitize_recipe_text() turns that into plain text
with newlines preserved; it never looks at recipe structure.
"""
from __future__ import annotations

import re
import warnings
from typing import Optional

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from nutrilabel import config
from nutrilabel.errors import InputTooLarge
from nutrilabel.knowledgebase import UNICODE_FRACTIONS

_FRACTION_RE = re.compile(r"(\d)?([%s])" % "".join(UNICODE_FRACTIONS))
_EMOJI_RE = re.compile(
    "[\U0001F000-\U0001FAFF"   # pictographs, emoticons, transport, symbols
    "\U0001FC00-\U0001FFFF"
    "\U00002600-\U000027BF"    # misc symbols + dingbats
    "\U0000FE0F\U000020E3]"    # variation selector, keycap
)
_HSPACE_RE = re.compile("[ \t\U000000A0]+")
_ZERO_WIDTH_RE = re.compile("[\U0000200B-\U0000200D\U0000FEFF]")


def check_size(text: str, max_bytes: Optional[int] = None, max_lines: Optional[int] = None) -> None:
    """Raise InputTooLarge when text exceeds the byte or line limit."""
    max_bytes = config.MAX_TEXT_BYTES if max_bytes is None else max_bytes
    max_lines = config.MAX_LINES if max_lines is None else max_lines

    size = len(text.encode("utf-8"))
    if size > max_bytes:
        raise InputTooLarge(size, max_bytes, "bytes")
    n_lines = text.count("\n") + 1 if text else 0
    if n_lines > max_lines:
        raise InputTooLarge(n_lines, max_lines, "lines")


def strip_markup(text: str) -> str:
    """Drop HTML tags and decode entities (&amp;, &frac12;, &#189;, ...)."""
    if "<" not in text and "&" not in text:
        return text
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(text, "html.parser").get_text()


def replace_unicode_fractions(text: str) -> str:
    """½ → 1/2, and 1½ → 1 1/2 so the mixed number survives."""
    def _sub(m: re.Match) -> str:
        whole = m.group(1)
        frac = UNICODE_FRACTIONS[m.group(2)]
        return f"{whole} {frac}" if whole else frac

    return _FRACTION_RE.sub(_sub, text)


def sanitize_recipe_text(text: str, max_bytes: Optional[int] = None, max_lines: Optional[int] = None) -> str:
    """
    Return cleaned recipe text.

    Steps: size check, markup/entity removal, Unicode fractions → ASCII,
    emoji/dingbats removed, runs of spaces/tabs collapsed (newlines kept),
    zero-width characters removed, outer whitespace trimmed.
    """
    check_size(text or "", max_bytes=max_bytes, max_lines=max_lines)
    if not text:
        return ""

    s = text.replace("\r\n", "\n").replace("\r", "\n")
    s = strip_markup(s)
    s = replace_unicode_fractions(s)
    s = _EMOJI_RE.sub("", s)
    s = _HSPACE_RE.sub(" ", s)
    s = _ZERO_WIDTH_RE.sub("", s)
    return s.strip()
