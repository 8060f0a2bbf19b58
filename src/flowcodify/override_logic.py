from __future__ import annotations

from .locator_emit import generate_locator_code
from .models import (
    ExplorationStep,
    LocatorCandidate,
    LocatorDescriptor,
    MaskRegion,
    MethodLocator,
    RefLocator,
    ReviewStep,
    StrategyType,
)

_METHOD_STRATEGY: dict[str, StrategyType] = {
    "getByTestId": "testid",
    "getByRole": "role",
    "getByText": "text",
}


def effective_locator(step: ExplorationStep, review_step: ReviewStep | None = None) -> LocatorDescriptor | None:
    """A reviewer-locked locator wins over the one recorded during exploration."""
    if review_step is not None and review_step.locked_locator is not None:
        return review_step.locked_locator
    return step.execution.locator


def effective_masks(step: ExplorationStep, review_step: ReviewStep | None = None) -> tuple[MaskRegion, ...]:
    masks = list(step.spec_action.mask)
    if review_step is not None:
        for mask in review_step.masks:
            if mask not in masks:
                masks.append(mask)
    return tuple(masks)


def build_locked_candidate(descriptor: LocatorDescriptor) -> LocatorCandidate:
    strategy: StrategyType = "css"
    if isinstance(descriptor, MethodLocator):
        strategy = _METHOD_STRATEGY.get(descriptor.method, "css")
    elif isinstance(descriptor, RefLocator):
        strategy = "ref"
    return LocatorCandidate(
        locator=generate_locator_code(descriptor),
        strategy_type=strategy,
        confidence=1.0,
        description=descriptor.description or "Locked by reviewer",
        metadata={"is_override": True, "descriptor": descriptor},
    )
