import json
from pathlib import Path

import pytest

from flowcodify.errors import LockfileFormatError, MissingLocatorTarget
from flowcodify.lockfile import (
    load_lockfile,
    load_review,
    locator_from_payload,
    lockfile_from_payload,
    mask_from_payload,
    review_from_payload,
    spec_action_from_payload,
)
from flowcodify.models import MethodLocator, Region, RegionMask, RefLocator, SelectorLocator, SelectorMask


def _lockfile_payload() -> dict:
    return {
        "spec": "checkout-flow",
        "spec_path": "specs/checkout-flow.yaml",
        "exploration_id": "exp-42",
        "timestamp": "2026-01-05T10:00:00Z",
        "base_url": "http://localhost:3000",
        "viewport": {"width": 1280, "height": 720},
        "steps": [
            {
                "step_index": 0,
                "spec_action": {"action": "navigate", "to": "/cart"},
                "execution": {"status": "completed", "duration_ms": 310},
            },
            {
                "step_index": 1,
                "spec_action": {"action": "click", "query": "checkout button", "retries": 2},
                "execution": {
                    "status": "completed",
                    "duration_ms": 120,
                    "method": "ai",
                    "selector_used": "#checkout",
                    "locator": {"method": "getByRole", "args": {"role": "button", "name": "Checkout"}},
                },
            },
        ],
        "outcome_checks": [{"check": "url_contains", "expected": "/done", "actual": "/done", "passed": True}],
    }


def test_lockfile_from_payload() -> None:
    lockfile = lockfile_from_payload(_lockfile_payload())
    assert lockfile.spec_name == "checkout-flow"
    assert lockfile.viewport == (1280, 720)
    assert len(lockfile.steps) == 2

    click = lockfile.steps[1]
    assert click.execution.locator == MethodLocator("getByRole", {"role": "button", "name": "Checkout"})
    assert click.execution.selector_used == "#checkout"
    assert click.spec_action.extra == {"retries": 2}
    assert lockfile.outcome_checks[0].passed


def test_spec_name_key_alias_and_missing_name() -> None:
    payload = _lockfile_payload()
    payload["spec_name"] = payload.pop("spec")
    assert lockfile_from_payload(payload).spec_name == "checkout-flow"
    with pytest.raises(LockfileFormatError):
        lockfile_from_payload({"steps": []})


def test_step_without_action_is_rejected() -> None:
    payload = _lockfile_payload()
    payload["steps"] = [{"spec_action": {"query": "x"}}]
    with pytest.raises(LockfileFormatError, match="action kind"):
        lockfile_from_payload(payload)


def test_spec_action_maps_reserved_keys() -> None:
    action = spec_action_from_payload(
        {
            "action": "wait",
            "for": "time",
            "duration": "2s",
            "pressEnter": True,
            "checks": [{"element_count": {"selector": "li", "expected": 3}}],
            "mask": [{"selector": ".ad"}],
        }
    )
    assert action.for_ == "time"
    assert action.duration == "2s"
    assert action.press_enter
    assert action.checks[0].element_count is not None
    assert action.checks[0].element_count.expected == 3
    assert action.mask == (SelectorMask(".ad"),)
    assert action.extra == {}


def test_recorded_duration_keeps_zero_and_absence_apart() -> None:
    payload = _lockfile_payload()
    payload["steps"][0]["execution"] = {"status": "completed"}
    payload["steps"][1]["execution"]["duration_ms"] = 0
    lockfile = lockfile_from_payload(payload)
    assert lockfile.steps[0].execution.duration_ms is None
    assert lockfile.steps[1].execution.duration_ms == 0


@pytest.mark.parametrize(
    "check",
    [
        {"element_count": {"selector": "li"}},
        {"element_count": {"selector": "li", "expected": "several"}},
        {"attribute": {"selector": "#a", "attribute": "href"}},
    ],
)
def test_incomplete_verify_checks_raise_format_error(check: dict) -> None:
    with pytest.raises(LockfileFormatError):
        spec_action_from_payload({"action": "verify_state", "checks": [check]})


def test_locator_precedence() -> None:
    both = locator_from_payload({"method": "getByTestId", "args": {"testId": "a"}, "selector": "#a"})
    assert isinstance(both, MethodLocator)
    assert locator_from_payload({"selector": "#a", "ref": "e1"}) == SelectorLocator("#a")
    assert locator_from_payload({"ref": "e1"}) == RefLocator("e1")
    assert locator_from_payload(None) is None
    with pytest.raises(MissingLocatorTarget):
        locator_from_payload({"description": "nothing"})


def test_mask_shapes() -> None:
    nested = mask_from_payload({"region": {"x": 1, "y": 2, "width": 3, "height": 4}, "reason": "clock"})
    flat = mask_from_payload({"x": 1, "y": 2, "width": 3, "height": 4})
    assert nested == RegionMask(Region(1.0, 2.0, 3.0, 4.0), reason="clock")
    assert flat.region == nested.region  # type: ignore[union-attr]
    with pytest.raises(LockfileFormatError):
        mask_from_payload({"reason": "nothing to mask"})


def test_review_from_payload_with_locked_locator() -> None:
    review = review_from_payload(
        {
            "exploration_id": "exp-42",
            "reviewer": "qa@example.com",
            "submitted_at": "2026-01-06T09:00:00Z",
            "verdict": "approved",
            "steps": [
                {
                    "step_index": 1,
                    "status": "approved",
                    "locked_locator": {"method": "getByTestId", "args": {"testId": "checkout"}},
                    "masks": [{"region": {"x": 0, "y": 0, "width": 100, "height": 5}}],
                }
            ],
        }
    )
    step = review.step(1)
    assert step is not None
    assert step.locked_locator == MethodLocator("getByTestId", {"testId": "checkout"})
    assert len(step.masks) == 1
    assert review.step(0) is None


def test_load_lockfile_and_review_from_disk(tmp_path: Path) -> None:
    lockfile_path = tmp_path / "lockfile.json"
    lockfile_path.write_text(json.dumps(_lockfile_payload()), encoding="utf-8")
    assert load_lockfile(lockfile_path).exploration_id == "exp-42"
    assert load_review(tmp_path / "review.json") is None


def test_invalid_json_raises_format_error(tmp_path: Path) -> None:
    path = tmp_path / "lockfile.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LockfileFormatError, match="Invalid lockfile JSON"):
        load_lockfile(path)
