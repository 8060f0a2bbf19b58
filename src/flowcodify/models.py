from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

StrategyType = Literal["ref", "testid", "role", "text", "css", "xpath"]
AnimationMode = Literal["disabled", "allow"]
StepStatus = Literal["completed", "failed", "skipped"]
ReviewVerdict = Literal["approved", "rejected", "pending"]


@dataclass(frozen=True, slots=True)
class ElementInfo:
    ref: str
    tag: str
    role: str | None = None
    text: str | None = None
    aria_label: str | None = None
    test_id: str | None = None
    class_name: str | None = None
    id: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    def attr(self, key: str) -> str | None:
        raw = self.attributes.get(key)
        if raw is None:
            return None
        value = str(raw).strip()
        return value or None


@dataclass(frozen=True, slots=True)
class DomSnapshot:
    elements: tuple[ElementInfo, ...] = ()
    tree: str = ""

    def __len__(self) -> int:
        return len(self.elements)


@dataclass(slots=True)
class LocatorCandidate:
    locator: str
    strategy_type: StrategyType
    confidence: float
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MethodLocator:
    method: str
    args: dict[str, Any]
    description: str | None = None


@dataclass(frozen=True, slots=True)
class SelectorLocator:
    selector: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class RefLocator:
    ref: str
    description: str | None = None


LocatorDescriptor = Union[MethodLocator, SelectorLocator, RefLocator]


@dataclass(frozen=True, slots=True)
class EmitOptions:
    page_var: str = "page"
    chain_first: bool = False
    nth: int | None = None
    within: LocatorDescriptor | None = None


@dataclass(frozen=True, slots=True)
class Region:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class SelectorMask:
    selector: str
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class RegionMask:
    region: Region
    reason: str | None = None


MaskRegion = Union[SelectorMask, RegionMask]


@dataclass(frozen=True, slots=True)
class ScreenshotDirective:
    name: str
    mask: tuple[MaskRegion, ...] = ()
    max_diff_pixel_ratio: float | None = None
    threshold: float | None = None
    animations: AnimationMode | None = None
    full_page: bool | None = None
    timeout: int | None = None


@dataclass(frozen=True, slots=True)
class ElementCount:
    selector: str
    expected: int


@dataclass(frozen=True, slots=True)
class AttributeCheck:
    selector: str
    attribute: str
    equals: str


@dataclass(frozen=True, slots=True)
class VerifyCheck:
    element_visible: str | None = None
    element_not_visible: str | None = None
    text_contains: str | None = None
    text_not_contains: str | None = None
    url_contains: str | None = None
    element_count: ElementCount | None = None
    attribute: AttributeCheck | None = None


@dataclass(frozen=True, slots=True)
class SpecAction:
    action: str
    id: str | None = None
    name: str | None = None
    description: str | None = None
    query: str | None = None
    selector: str | None = None
    ref: str | None = None
    to: str | None = None
    value: str | None = None
    for_: str | None = None
    text: str | None = None
    contains: str | None = None
    duration: str | int | float | None = None
    timeout: str | int | None = None
    option: str | None = None
    checked: bool | None = None
    key: str | None = None
    press_enter: bool = False
    mask: tuple[MaskRegion, ...] = ()
    checks: tuple[VerifyCheck, ...] = ()
    question: str | None = None
    expected: Any = None
    save_as: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class StepExecution:
    status: StepStatus = "completed"
    duration_ms: int | None = None
    method: str | None = None
    element_ref: str | None = None
    selector_used: str | None = None
    locator: LocatorDescriptor | None = None
    value_used: str | None = None
    url_used: str | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class ExplorationStep:
    step_index: int
    spec_action: SpecAction
    execution: StepExecution = field(default_factory=StepExecution)


@dataclass(frozen=True, slots=True)
class OutcomeCheck:
    check: str
    expected: Any
    actual: Any
    passed: bool


@dataclass(frozen=True, slots=True)
class ExplorationLockfile:
    spec_name: str
    spec_path: str
    exploration_id: str
    timestamp: str
    steps: tuple[ExplorationStep, ...] = ()
    outcome_checks: tuple[OutcomeCheck, ...] = ()
    base_url: str | None = None
    browser: str = "chromium"
    viewport: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class ReviewStep:
    step_index: int
    status: ReviewVerdict = "pending"
    comment: str | None = None
    tags: tuple[str, ...] = ()
    locked_locator: LocatorDescriptor | None = None
    masks: tuple[MaskRegion, ...] = ()


@dataclass(frozen=True, slots=True)
class ReviewData:
    exploration_id: str
    reviewer: str | None = None
    submitted_at: str | None = None
    updated_at: str | None = None
    verdict: ReviewVerdict = "pending"
    steps: tuple[ReviewStep, ...] = ()
    overall_notes: str | None = None

    def step(self, step_index: int) -> ReviewStep | None:
        for item in self.steps:
            if item.step_index == step_index:
                return item
        return None


@dataclass(frozen=True, slots=True)
class GeneratedTest:
    path: str
    content: str
    spec_name: str
    exploration_id: str
    generated_at: str


@dataclass(frozen=True, slots=True)
class GeneratedConfig:
    path: str
    content: str
