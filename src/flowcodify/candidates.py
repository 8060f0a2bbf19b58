from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import Any, Iterable, Mapping

from .dom_snapshot import snapshot_from_payload
from .locator_emit import generate_locator_code
from .models import (
    DomSnapshot,
    ElementInfo,
    LocatorCandidate,
    LocatorDescriptor,
    MethodLocator,
    RefLocator,
    SelectorLocator,
    StrategyType,
)
from .override_logic import build_locked_candidate
from .scoring import effective_role, normalize_query, score_element

logger = logging.getLogger("flowcodify.candidates")

DEFAULT_MAX_CANDIDATES = 5
MAX_TEXT_LENGTH = 50
MAX_EXACT_TEXT_LENGTH = 30

STRATEGY_CONFIDENCE: dict[str, float] = {
    "ref": 1.0,
    "testid": 0.95,
    "role_named": 0.9,
    "role": 0.85,
    "text_exact": 0.85,
    "text_partial": 0.7,
    "css_id": 0.75,
    "css_class": 0.6,
    "css_tag": 0.4,
}

TEST_ID_ATTRS = ("data-testid", "data-test")
DEFAULT_STRATEGIES: tuple[StrategyType, ...] = ("ref", "testid", "role", "text", "css")

_CSS_SAFE_IDENT = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(slots=True)
class CandidateResolver:
    """Ranks locator strategies for the element a query most likely names.

    A reviewer-locked descriptor passed as ``locked`` is always ranked first,
    and any generated candidate that would emit the same Playwright code is
    dropped in its favour.
    """

    max_candidates: int = DEFAULT_MAX_CANDIDATES
    preferred_strategies: tuple[StrategyType, ...] = field(default=DEFAULT_STRATEGIES)

    def resolve(
        self,
        query: str,
        snapshot: DomSnapshot | Mapping[str, Any] | Iterable[Any] | None,
        locked: LocatorDescriptor | None = None,
    ) -> list[LocatorCandidate]:
        limit = max(0, self.max_candidates)
        element = find_best_element(query, snapshot)
        candidates = self.for_element(element) if element is not None else []
        if locked is not None:
            candidates = self._pin_locked(candidates, locked)
        return candidates[:limit]

    def for_element(self, element: ElementInfo) -> list[LocatorCandidate]:
        allowed = set(self.preferred_strategies)
        return [item for item in resolve_candidates_for_element(element) if item.strategy_type in allowed]

    def _pin_locked(self, candidates: list[LocatorCandidate], locked: LocatorDescriptor) -> list[LocatorCandidate]:
        pinned = build_locked_candidate(locked)
        locked_code = pinned.locator
        kept = [item for item in candidates if generate_locator_code(candidate_to_locator(item)) != locked_code]
        if len(kept) < len(candidates):
            logger.debug("Locked locator %s replaces an equivalent generated candidate", locked_code)
        return [pinned, *kept]


def resolve_candidates(
    query: str,
    snapshot: DomSnapshot | Mapping[str, Any] | Iterable[Any] | None,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
    locked: LocatorDescriptor | None = None,
) -> list[LocatorCandidate]:
    return CandidateResolver(max_candidates=max_candidates).resolve(query, snapshot, locked=locked)


def find_best_element(
    query: str,
    snapshot: DomSnapshot | Mapping[str, Any] | Iterable[Any] | None,
) -> ElementInfo | None:
    """Return the highest-scoring element, or None when nothing scores above zero.

    Equal scores keep the element that comes first in snapshot order.
    """
    _lowered, terms = normalize_query(query)
    if not terms:
        return None
    normalized = snapshot_from_payload(snapshot)
    if not normalized.elements:
        return None

    best: ElementInfo | None = None
    best_score = 0.0
    for element in normalized.elements:
        score = score_element(query, element).total
        if score > best_score:
            best = element
            best_score = score

    if best is not None:
        logger.debug("Query %r matched element %s (score %.2f)", query, best.ref, best_score)
    return best


def resolve_candidates_for_element(element: ElementInfo) -> list[LocatorCandidate]:
    candidates: list[LocatorCandidate] = [build_ref_candidate(element.ref)]

    test_id = _test_id_source(element)
    if test_id:
        attr, value = test_id
        candidates.append(build_test_id_candidate(value, attr=attr))

    role = effective_role(element)
    if role:
        candidates.append(build_role_candidate(role, _accessible_name(element)))

    text = _normalize_space(element.text)
    if text and len(text) <= MAX_TEXT_LENGTH:
        candidates.append(build_text_candidate(text, exact=len(text) <= MAX_EXACT_TEXT_LENGTH))

    candidates.append(build_css_candidate(element))

    # sort() is stable, so ties keep generation order.
    candidates.sort(key=lambda item: -item.confidence)
    return candidates


def build_ref_candidate(ref: str) -> LocatorCandidate:
    return LocatorCandidate(
        locator=f"@{ref}",
        strategy_type="ref",
        confidence=STRATEGY_CONFIDENCE["ref"],
        description="Element reference from snapshot",
        metadata={"ref": ref},
    )


def build_test_id_candidate(test_id: str, attr: str = "data-testid") -> LocatorCandidate:
    return LocatorCandidate(
        locator=f'[{attr}="{_escape_css_string(test_id)}"]',
        strategy_type="testid",
        confidence=STRATEGY_CONFIDENCE["testid"],
        description="Test ID selector",
        metadata={"attr": attr, "test_id": test_id},
    )


def build_role_candidate(role: str, name: str | None = None) -> LocatorCandidate:
    if name:
        locator = f'role={role}[name="{_escape_css_string(name)}"]'
        description = f'ARIA role: {role} with name "{name}"'
        confidence = STRATEGY_CONFIDENCE["role_named"]
    else:
        locator = f"role={role}"
        description = f"ARIA role: {role}"
        confidence = STRATEGY_CONFIDENCE["role"]
    return LocatorCandidate(
        locator=locator,
        strategy_type="role",
        confidence=confidence,
        description=description,
        metadata={"role": role, "name": name},
    )


def build_text_candidate(text: str, exact: bool = False) -> LocatorCandidate:
    escaped = _escape_css_string(text)
    return LocatorCandidate(
        locator=f'text="{escaped}"' if exact else f'text~="{escaped}"',
        strategy_type="text",
        confidence=STRATEGY_CONFIDENCE["text_exact" if exact else "text_partial"],
        description=f"Text content{' (exact)' if exact else ' (partial)'}",
        metadata={"text": text, "exact": exact},
    )


def build_css_candidate(element: ElementInfo) -> LocatorCandidate:
    tag = (element.tag or "").strip().lower() or "*"
    id_value = (element.id or "").strip()
    if id_value:
        if _CSS_SAFE_IDENT.fullmatch(id_value):
            selector = f"#{id_value}"
        else:
            selector = f'{tag}[id="{_escape_css_string(id_value)}"]'
        confidence = STRATEGY_CONFIDENCE["css_id"]
        description = "CSS selector (id)"
    else:
        classes = [token for token in (element.class_name or "").split() if _CSS_SAFE_IDENT.fullmatch(token)]
        if classes:
            selector = tag + "".join(f".{token}" for token in classes[:2])
            confidence = STRATEGY_CONFIDENCE["css_class"]
            description = "CSS selector (class)"
        else:
            selector = tag
            confidence = STRATEGY_CONFIDENCE["css_tag"]
            description = "CSS selector (tag)"
    return LocatorCandidate(
        locator=selector,
        strategy_type="css",
        confidence=confidence,
        description=description,
        metadata={"selector": selector},
    )


def candidate_to_locator(candidate: LocatorCandidate) -> LocatorDescriptor:
    """Turn a ranked candidate into the descriptor the code emitter consumes."""
    meta = candidate.metadata
    locked = meta.get("descriptor")
    if isinstance(locked, (MethodLocator, SelectorLocator, RefLocator)):
        return locked
    strategy = candidate.strategy_type
    if strategy == "ref":
        return RefLocator(ref=str(meta.get("ref") or candidate.locator.lstrip("@")), description=candidate.description)
    if strategy == "testid":
        if meta.get("attr", "data-testid") == "data-testid":
            return MethodLocator("getByTestId", {"testId": meta["test_id"]}, description=candidate.description)
        return SelectorLocator(candidate.locator, description=candidate.description)
    if strategy == "role":
        args: dict[str, Any] = {"role": meta["role"]}
        if meta.get("name"):
            args["name"] = meta["name"]
        return MethodLocator("getByRole", args, description=candidate.description)
    if strategy == "text":
        return MethodLocator(
            "getByText",
            {"text": meta["text"], "exact": bool(meta.get("exact"))},
            description=candidate.description,
        )
    if strategy == "xpath":
        return SelectorLocator(f"xpath={candidate.locator}", description=candidate.description)
    return SelectorLocator(str(meta.get("selector") or candidate.locator), description=candidate.description)


def _test_id_source(element: ElementInfo) -> tuple[str, str] | None:
    if element.test_id and element.test_id.strip():
        return "data-testid", element.test_id.strip()
    for attr in TEST_ID_ATTRS:
        value = element.attr(attr)
        if value:
            return attr, value
    return None


def _accessible_name(element: ElementInfo) -> str | None:
    aria_label = _normalize_space(element.aria_label)
    if aria_label:
        return aria_label
    text = _normalize_space(element.text)
    if text and len(text) <= MAX_TEXT_LENGTH:
        return text
    return None


def _escape_css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _normalize_space(value: str | None) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()
