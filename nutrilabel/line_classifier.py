"""
Line classifier: decides which lines of a pasted recipe are ingredient lines.

Rules are evaluated in a fixed order; the first that fires names the reason a
line is skipped. The dish title (first non-empty line) is picked by the
recipe parser and never passes through these rules.
"""
from __future__ import annotations

import re
from typing import Callable, Optional, Sequence, Tuple

SERVING_MIN = 1
SERVING_MAX = 1000

SECTION_HEADER_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"^(directions?|instructions?|steps?|method|preparation|prep time|cook time|total time):?$",
    r"^(source|from|recipe (from|by|courtesy)|adapted from):?$",
    r"^(nutrition|nutritional? info(rmation)?|calories):?$",
    r"^(notes?|tips?|variations?):?$",
    r"^(ingredients?):?$",
    r"^(makes?|serves?|servings?|yield):?$",
    r"^(wash hands|preheat|heat|bake|cook|stir|mix|combine|pour|add|remove|place|set)\b",
    r"\brating\b",
    r"\badd to (cookbook|favorites)\b",
))

_SOURCE_HEADER_RE = re.compile(r"^(source|from|adapted from|recipe (by|from)|courtesy of):?$", re.IGNORECASE)
_URL_RE = re.compile(r"^(https?://|www\.)", re.IGNORECASE)
_SERVINGS_ONLY_RE = re.compile(r"^\d+\s+(servings?|serves?|portions?|people)$", re.IGNORECASE)
_CAPITALIZED_RE = re.compile(r"\b[A-Z][a-z]+")

SERVING_PATTERNS = (
    re.compile(r"^(makes?|serves?|servings?|yield):?\s*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)\s+(servings?|serves?|portions?|people)", re.IGNORECASE),
)
_SERVING_LABEL_RE = re.compile(r"^(makes?|serves?|yield):?$", re.IGNORECASE)
_SERVING_NEXT_LINE_RE = re.compile(r"^(\d+)\s*(servings?|serves?|portions?|people)?", re.IGNORECASE)
_SERVING_VALUE_RE = re.compile(r"^\d+\s*(servings?|serves?|portions?|people)?$", re.IGNORECASE)


def _is_long_sentence(line: str, title: str, prev: str) -> bool:
    return len(line.split()) > 8 and line.endswith((".", "!"))


def _looks_like_organization(line: str, title: str, prev: str) -> bool:
    # "Ohio State University Cooperative Extension"
    if re.search(r"\d", line):
        return False
    return len(_CAPITALIZED_RE.findall(line)) >= 3 and len(line.split()) >= 3


def _is_single_word(line: str, title: str, prev: str) -> bool:
    return len(line.split()) == 1 and not re.search(r"\d", line)


# (reason, predicate(line, title_lower, previous_line)), evaluated in order
SKIP_RULES: Tuple[Tuple[str, Callable[[str, str, str], bool]], ...] = (
    ("empty", lambda line, title, prev: not line),
    ("title", lambda line, title, prev: bool(title) and line.lower() == title),
    ("section_header", lambda line, title, prev: any(p.search(line) for p in SECTION_HEADER_PATTERNS)),
    ("url", lambda line, title, prev: bool(_URL_RE.match(line))),
    ("direction_sentence", _is_long_sentence),
    ("servings_only", lambda line, title, prev: bool(_SERVINGS_ONLY_RE.match(line))),
    ("serving_count", lambda line, title, prev: bool(SERVING_PATTERNS[0].match(line))),
    ("serving_count_after_label",
     lambda line, title, prev: bool(_SERVING_LABEL_RE.match(prev)) and bool(_SERVING_VALUE_RE.match(line))),
    ("organization", _looks_like_organization),
    ("single_word", _is_single_word),
    ("after_source_header", lambda line, title, prev: bool(_SOURCE_HEADER_RE.match(prev))),
)


def skip_reason(line: str, title: str = "", previous_line: str = "") -> Optional[str]:
    """Name of the first rule that rejects `line`, or None for an ingredient line."""
    s = (line or "").strip()
    t = (title or "").strip().lower()
    prev = (previous_line or "").strip()
    for reason, rule in SKIP_RULES:
        if rule(s, t, prev):
            return reason
    return None


def should_skip_line(line: str, title: str = "", previous_line: str = "") -> bool:
    return skip_reason(line, title, previous_line) is not None


def _valid_count(raw: str) -> Optional[int]:
    n = int(raw)
    return n if SERVING_MIN <= n <= SERVING_MAX else None


def extract_serving_count(lines: Sequence[str]) -> Optional[int]:
    """
    First explicit serving count found in the recipe.

    Handles "Serves 4", "Yield: 12", "6 servings", and a bare "Makes:" label
    with the number on the following line. Counts outside 1..1000 are ignored.
    """
    stripped = [(l or "").strip() for l in lines]
    for i, line in enumerate(stripped):
        for pattern in SERVING_PATTERNS:
            m = pattern.search(line)
            if m:
                n = _valid_count(m.group(2) if pattern is SERVING_PATTERNS[0] else m.group(1))
                if n is not None:
                    return n
        if _SERVING_LABEL_RE.match(line) and i + 1 < len(stripped):
            m = _SERVING_NEXT_LINE_RE.match(stripped[i + 1])
            if m:
                n = _valid_count(m.group(1))
                if n is not None:
                    return n
    return None
