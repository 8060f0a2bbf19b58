from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from .errors import LockfileFormatError, MissingLocatorTarget
from .models import (
    AttributeCheck,
    ElementCount,
    ExplorationLockfile,
    ExplorationStep,
    LocatorDescriptor,
    MaskRegion,
    MethodLocator,
    OutcomeCheck,
    RefLocator,
    Region,
    RegionMask,
    ReviewData,
    ReviewStep,
    SelectorLocator,
    SelectorMask,
    SpecAction,
    StepExecution,
    VerifyCheck,
)

logger = logging.getLogger("flowcodify.lockfile")

_SPEC_ACTION_FIELDS = {
    "action",
    "id",
    "name",
    "description",
    "query",
    "selector",
    "ref",
    "to",
    "value",
    "for",
    "text",
    "contains",
    "duration",
    "timeout",
    "option",
    "checked",
    "key",
    "pressEnter",
    "press_enter",
    "mask",
    "checks",
    "question",
    "expected",
    "save_as",
}


def locator_from_payload(payload: Mapping[str, Any] | LocatorDescriptor | None) -> LocatorDescriptor | None:
    """Parse a ``{method, args}`` / ``{selector}`` / ``{ref}`` payload.

    Precedence follows the emitter: method+args, then selector, then ref. A
    mapping with none of them raises ``MissingLocatorTarget``.
    """
    if payload is None:
        return None
    if isinstance(payload, (MethodLocator, SelectorLocator, RefLocator)):
        return payload
    if not isinstance(payload, Mapping):
        raise LockfileFormatError(f"Locator must be an object, got {type(payload).__name__}")

    description = _optional_str(payload.get("description"))
    method = _optional_str(payload.get("method"))
    args = payload.get("args")
    if method and isinstance(args, Mapping):
        return MethodLocator(method=method, args=dict(args), description=description)
    selector = _optional_str(payload.get("selector"))
    if selector:
        return SelectorLocator(selector=selector, description=description)
    ref = _optional_str(payload.get("ref"))
    if ref:
        return RefLocator(ref=ref, description=description)
    raise MissingLocatorTarget()


def mask_from_payload(payload: Mapping[str, Any] | MaskRegion) -> MaskRegion:
    if isinstance(payload, (SelectorMask, RegionMask)):
        return payload
    if not isinstance(payload, Mapping):
        raise LockfileFormatError(f"Mask must be an object, got {type(payload).__name__}")

    reason = _optional_str(payload.get("reason"))
    selector = _optional_str(payload.get("selector"))
    if selector:
        return SelectorMask(selector=selector, reason=reason)

    region = payload.get("region")
    source = region if isinstance(region, Mapping) else payload
    try:
        return RegionMask(
            region=Region(
                x=float(source["x"]),
                y=float(source["y"]),
                width=float(source["width"]),
                height=float(source["height"]),
            ),
            reason=reason,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LockfileFormatError("Mask needs either a selector or a region with x, y, width, height") from exc


def verify_check_from_payload(payload: Mapping[str, Any]) -> VerifyCheck:
    count = payload.get("element_count")
    attribute = payload.get("attribute")
    try:
        element_count = (
            ElementCount(selector=str(count["selector"]), expected=int(count["expected"]))
            if isinstance(count, Mapping)
            else None
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LockfileFormatError("element_count check needs a selector and an integer expected") from exc
    try:
        attribute_check = (
            AttributeCheck(
                selector=str(attribute["selector"]),
                attribute=str(attribute["attribute"]),
                equals=str(attribute["equals"]),
            )
            if isinstance(attribute, Mapping)
            else None
        )
    except KeyError as exc:
        raise LockfileFormatError(f"attribute check is missing {exc.args[0]!r}") from exc
    return VerifyCheck(
        element_visible=_optional_str(payload.get("element_visible")),
        element_not_visible=_optional_str(payload.get("element_not_visible")),
        text_contains=_optional_str(payload.get("text_contains")),
        text_not_contains=_optional_str(payload.get("text_not_contains")),
        url_contains=_optional_str(payload.get("url_contains")),
        element_count=element_count,
        attribute=attribute_check,
    )


def spec_action_from_payload(payload: Mapping[str, Any]) -> SpecAction:
    action = _optional_str(payload.get("action"))
    if not action:
        raise LockfileFormatError("Step is missing its action kind")

    checked = payload.get("checked")
    return SpecAction(
        action=action,
        id=_optional_str(payload.get("id")),
        name=_optional_str(payload.get("name")),
        description=_optional_str(payload.get("description")),
        query=_optional_str(payload.get("query")),
        selector=_optional_str(payload.get("selector")),
        ref=_optional_str(payload.get("ref")),
        to=_optional_str(payload.get("to")),
        value=_optional_str(payload.get("value")),
        for_=_optional_str(payload.get("for")),
        text=_optional_str(payload.get("text")),
        contains=_optional_str(payload.get("contains")),
        duration=payload.get("duration"),
        timeout=payload.get("timeout"),
        option=_optional_str(payload.get("option")),
        checked=None if checked is None else bool(checked),
        key=_optional_str(payload.get("key")),
        press_enter=bool(payload.get("pressEnter", payload.get("press_enter", False))),
        mask=tuple(mask_from_payload(item) for item in payload.get("mask") or ()),
        checks=tuple(verify_check_from_payload(item) for item in payload.get("checks") or ()),
        question=_optional_str(payload.get("question")),
        expected=payload.get("expected"),
        save_as=_optional_str(payload.get("save_as")),
        extra={str(key): value for key, value in payload.items() if key not in _SPEC_ACTION_FIELDS},
    )


def execution_from_payload(payload: Mapping[str, Any] | None) -> StepExecution:
    data = payload or {}
    return StepExecution(
        status=str(data.get("status") or "completed"),  # type: ignore[arg-type]
        duration_ms=_optional_int(data.get("duration_ms")),
        method=_optional_str(data.get("method")),
        element_ref=_optional_str(data.get("element_ref")),
        selector_used=_optional_str(data.get("selector_used")),
        locator=locator_from_payload(data.get("locator")),
        value_used=_optional_str(data.get("value_used")),
        url_used=_optional_str(data.get("url_used")),
        error=_optional_str(data.get("error")),
    )


def step_from_payload(payload: Mapping[str, Any], position: int = 0) -> ExplorationStep:
    spec_action = payload.get("spec_action")
    if not isinstance(spec_action, Mapping):
        raise LockfileFormatError(f"Step {position} is missing spec_action")
    raw_index = payload.get("step_index")
    return ExplorationStep(
        step_index=position if raw_index is None else int(raw_index),
        spec_action=spec_action_from_payload(spec_action),
        execution=execution_from_payload(payload.get("execution")),
    )


def lockfile_from_payload(payload: Mapping[str, Any]) -> ExplorationLockfile:
    if not isinstance(payload, Mapping):
        raise LockfileFormatError("Lockfile must be a JSON object")
    spec_name = _optional_str(payload.get("spec")) or _optional_str(payload.get("spec_name"))
    if not spec_name:
        raise LockfileFormatError("Lockfile is missing the spec name")

    viewport = payload.get("viewport")
    return ExplorationLockfile(
        spec_name=spec_name,
        spec_path=str(payload.get("spec_path") or ""),
        exploration_id=str(payload.get("exploration_id") or ""),
        timestamp=str(payload.get("timestamp") or ""),
        steps=tuple(step_from_payload(item, position) for position, item in enumerate(payload.get("steps") or ())),
        outcome_checks=tuple(
            OutcomeCheck(
                check=str(item.get("check") or ""),
                expected=item.get("expected"),
                actual=item.get("actual"),
                passed=bool(item.get("passed")),
            )
            for item in payload.get("outcome_checks") or ()
        ),
        base_url=_optional_str(payload.get("base_url")),
        browser=str(payload.get("browser") or "chromium"),
        viewport=(
            (int(viewport["width"]), int(viewport["height"]))
            if isinstance(viewport, Mapping) and "width" in viewport and "height" in viewport
            else None
        ),
    )


def review_from_payload(payload: Mapping[str, Any]) -> ReviewData:
    if not isinstance(payload, Mapping):
        raise LockfileFormatError("Review must be a JSON object")
    steps: list[ReviewStep] = []
    for item in payload.get("steps") or ():
        steps.append(
            ReviewStep(
                step_index=int(item.get("step_index", 0)),
                status=str(item.get("status") or "pending"),  # type: ignore[arg-type]
                comment=_optional_str(item.get("comment")),
                tags=tuple(str(tag) for tag in item.get("tags") or ()),
                locked_locator=locator_from_payload(item.get("locked_locator") or item.get("locator")),
                masks=tuple(mask_from_payload(mask) for mask in item.get("masks") or ()),
            )
        )
    return ReviewData(
        exploration_id=str(payload.get("exploration_id") or ""),
        reviewer=_optional_str(payload.get("reviewer")),
        submitted_at=_optional_str(payload.get("submitted_at")),
        updated_at=_optional_str(payload.get("updated_at")),
        verdict=str(payload.get("verdict") or "pending"),  # type: ignore[arg-type]
        steps=tuple(steps),
        overall_notes=_optional_str(payload.get("overall_notes")),
    )


def load_lockfile(path: Path) -> ExplorationLockfile:
    payload = _read_json(path, "lockfile")
    lockfile = lockfile_from_payload(payload)
    logger.debug("Loaded lockfile %s with %d steps", path, len(lockfile.steps))
    return lockfile


def load_review(path: Path) -> ReviewData | None:
    """Read ``review.json`` if present; a missing review is not an error."""
    if not path.exists() or not path.is_file():
        logger.info("No review found at %s", path)
        return None
    return review_from_payload(_read_json(path, "review"))


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise LockfileFormatError(f"Invalid {label} JSON in {path}: {exc}") from exc


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise LockfileFormatError(f"Expected an integer, got {value!r}") from exc
