from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ActionCategory = Literal["Navigation", "Interaction", "Input", "Wait", "Assertion", "Visual", "Exploration"]


@dataclass(frozen=True, slots=True)
class ActionSpec:
    key: str
    label: str
    category: ActionCategory
    description: str
    targets_element: bool = False
    deterministic: bool = True


ACTION_CATALOG: tuple[ActionSpec, ...] = (
    ActionSpec(
        key="navigate",
        label="Navigate to",
        category="Navigation",
        description="Loads a URL in the current page.",
    ),
    ActionSpec(
        key="back",
        label="Go back",
        category="Navigation",
        description="Navigates one entry back in history.",
    ),
    ActionSpec(
        key="forward",
        label="Go forward",
        category="Navigation",
        description="Navigates one entry forward in history.",
    ),
    ActionSpec(
        key="refresh",
        label="Reload",
        category="Navigation",
        description="Reloads the current page.",
    ),
    ActionSpec(
        key="reload",
        label="Reload",
        category="Navigation",
        description="Alias of refresh.",
    ),
    ActionSpec(
        key="click",
        label="Click",
        category="Interaction",
        description="Clicks the target element.",
        targets_element=True,
    ),
    ActionSpec(
        key="select",
        label="Select",
        category="Interaction",
        description="Selects an option in a select element.",
        targets_element=True,
    ),
    ActionSpec(
        key="check",
        label="Checkbox",
        category="Interaction",
        description="Checks or unchecks a checkbox or radio.",
        targets_element=True,
    ),
    ActionSpec(
        key="uncheck",
        label="Uncheck",
        category="Interaction",
        description="Unchecks a checkbox.",
        targets_element=True,
    ),
    ActionSpec(
        key="scroll_into_view",
        label="Scroll into view",
        category="Interaction",
        description="Scrolls the target element into the viewport.",
        targets_element=True,
    ),
    ActionSpec(
        key="press",
        label="Press",
        category="Input",
        description="Presses a key on the target element or the keyboard.",
    ),
    ActionSpec(
        key="fill",
        label="Fill",
        category="Input",
        description="Replaces the value of an input.",
        targets_element=True,
    ),
    ActionSpec(
        key="type",
        label="Type",
        category="Input",
        description="Types into an input one character at a time.",
        targets_element=True,
    ),
    ActionSpec(
        key="wait",
        label="Wait for",
        category="Wait",
        description="Waits for an element, text, URL, or a fixed duration.",
    ),
    ActionSpec(
        key="verify_state",
        label="Verify state",
        category="Assertion",
        description="Asserts element visibility, text, URL, count, or attributes.",
    ),
    ActionSpec(
        key="screenshot",
        label="Screenshot",
        category="Visual",
        description="Compares the page against a baseline screenshot.",
    ),
    ActionSpec(
        key="identify_element",
        label="Identify element",
        category="Exploration",
        description="Exploration-time element discovery.",
        deterministic=False,
    ),
    ActionSpec(
        key="ai_verify",
        label="AI verify",
        category="Exploration",
        description="Exploration-time AI judgement.",
        deterministic=False,
    ),
    ActionSpec(
        key="custom",
        label="Custom",
        category="Exploration",
        description="Open extension point without generated code.",
        deterministic=False,
    ),
)

_ACTION_BY_KEY: dict[str, ActionSpec] = {spec.key: spec for spec in ACTION_CATALOG}


def get_action_spec(action_key: str) -> ActionSpec | None:
    return _ACTION_BY_KEY.get(action_key)


def action_label(action_key: str) -> str:
    spec = get_action_spec(action_key)
    if spec:
        return spec.label
    return action_key


def action_category(action_key: str) -> str:
    spec = get_action_spec(action_key)
    if not spec:
        return "Unknown"
    return spec.category


def is_inert_action(action_key: str) -> bool:
    """Unknown kinds and exploration-only kinds emit a marker instead of runtime code."""
    spec = get_action_spec(action_key)
    return spec is None or not spec.deterministic


def targets_element(action_key: str) -> bool:
    spec = get_action_spec(action_key)
    return bool(spec and spec.targets_element)
