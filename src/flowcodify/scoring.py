from __future__ import annotations

from dataclasses import dataclass
import re

from .models import ElementInfo

# (exact, containment, per-term overlap weight)
TEXT_WEIGHTS: tuple[float, float, float] = (1.0, 0.8, 0.6)
ARIA_LABEL_WEIGHTS: tuple[float, float, float] = (0.9, 0.7, 0.5)

TAG_MATCH_SCORE = 0.4
EXPLICIT_ROLE_SCORE = 0.5
IMPLICIT_ROLE_SCORE = 0.4
TEST_ID_OVERLAP_WEIGHT = 0.3
CLASS_OVERLAP_WEIGHT = 0.2
MAX_MATCH_SCORE = 1.0

IMPLICIT_ROLES: dict[str, str] = {
    "a": "link",
    "article": "article",
    "aside": "complementary",
    "button": "button",
    "dialog": "dialog",
    "footer": "contentinfo",
    "form": "form",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "header": "banner",
    "hr": "separator",
    "img": "img",
    "input": "textbox",
    "li": "listitem",
    "main": "main",
    "nav": "navigation",
    "ol": "list",
    "option": "option",
    "progress": "progressbar",
    "section": "region",
    "select": "combobox",
    "table": "table",
    "tbody": "rowgroup",
    "td": "cell",
    "textarea": "textbox",
    "th": "columnheader",
    "thead": "rowgroup",
    "tr": "row",
    "ul": "list",
}


@dataclass(frozen=True, slots=True)
class MatchBreakdown:
    text: float
    aria_label: float
    tag: float
    role: float
    test_id: float
    class_name: float
    total: float


def normalize_query(query: str | None) -> tuple[str, tuple[str, ...]]:
    lowered = (query or "").strip().lower()
    return lowered, tuple(lowered.split())


def implicit_role(tag: str | None) -> str | None:
    return IMPLICIT_ROLES.get((tag or "").strip().lower())


def effective_role(element: ElementInfo) -> str | None:
    explicit = (element.role or "").strip()
    if explicit:
        return explicit
    return implicit_role(element.tag)


def score_element(query: str, element: ElementInfo) -> MatchBreakdown:
    lowered, terms = normalize_query(query)
    if not terms:
        return MatchBreakdown(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    text = _phrase_signal(lowered, terms, element.text, TEXT_WEIGHTS)
    aria = _phrase_signal(lowered, terms, element.aria_label, ARIA_LABEL_WEIGHTS)

    tag_name = (element.tag or "").strip().lower()
    tag = TAG_MATCH_SCORE if tag_name and tag_name in terms else 0.0

    role = 0.0
    explicit = (element.role or "").strip().lower()
    if explicit and explicit in terms:
        role = EXPLICIT_ROLE_SCORE
    else:
        implied = implicit_role(tag_name)
        if implied and implied in terms:
            role = IMPLICIT_ROLE_SCORE

    test_id_value = element.test_id or element.attr("data-testid") or element.attr("data-test")
    test_id = _term_overlap(terms, _identifier_words(test_id_value)) * TEST_ID_OVERLAP_WEIGHT
    class_name = _term_overlap(terms, _identifier_words(element.class_name)) * CLASS_OVERLAP_WEIGHT

    total = min(MAX_MATCH_SCORE, text + aria + tag + role + test_id + class_name)
    return MatchBreakdown(
        text=text,
        aria_label=aria,
        tag=tag,
        role=role,
        test_id=test_id,
        class_name=class_name,
        total=total,
    )


def _phrase_signal(
    lowered_query: str,
    terms: tuple[str, ...],
    value: str | None,
    weights: tuple[float, float, float],
) -> float:
    haystack = _normalize_space(value).lower()
    if not haystack:
        return 0.0
    exact, contains, overlap = weights
    if haystack == lowered_query:
        return exact
    if lowered_query in haystack:
        return contains
    return _term_overlap(terms, haystack) * overlap


def _term_overlap(terms: tuple[str, ...], haystack: str) -> float:
    if not terms or not haystack:
        return 0.0
    found = sum(1 for term in terms if term in haystack)
    return found / len(terms)


def _identifier_words(value: str | None) -> str:
    if not value:
        return ""
    return _normalize_space(re.sub(r"[-_]", " ", value)).lower()


def _normalize_space(value: str | None) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()
