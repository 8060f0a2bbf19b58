from flowcodify.candidates import candidate_to_locator
from flowcodify.models import (
    ExplorationStep,
    MethodLocator,
    Region,
    RefLocator,
    RegionMask,
    ReviewStep,
    SelectorLocator,
    SelectorMask,
    SpecAction,
    StepExecution,
)
from flowcodify.override_logic import (
    build_locked_candidate,
    effective_locator,
    effective_masks,
)


def _click_step() -> ExplorationStep:
    return ExplorationStep(
        step_index=3,
        spec_action=SpecAction(action="click", query="save", mask=(SelectorMask(".clock"),)),
        execution=StepExecution(locator=SelectorLocator("button.save"), selector_used="#save"),
    )


def test_locked_locator_wins_over_recorded_one() -> None:
    step = _click_step()
    locked = MethodLocator("getByTestId", {"testId": "save"})
    assert effective_locator(step) == SelectorLocator("button.save")
    assert effective_locator(step, ReviewStep(step_index=3)) == SelectorLocator("button.save")
    assert effective_locator(step, ReviewStep(step_index=3, locked_locator=locked)) is locked


def test_review_masks_are_appended_without_duplicates() -> None:
    region = RegionMask(Region(0, 90, 100, 10), reason="footer")
    review_step = ReviewStep(step_index=3, masks=(SelectorMask(".clock"), region))
    assert effective_masks(_click_step(), review_step) == (SelectorMask(".clock"), region)
    assert effective_masks(_click_step()) == (SelectorMask(".clock"),)


def test_locked_candidate_carries_descriptor() -> None:
    descriptor = MethodLocator("getByTestId", {"testId": "save"})
    locked = build_locked_candidate(descriptor)

    assert locked.strategy_type == "testid"
    assert locked.locator == "page.getByTestId('save')"
    assert locked.confidence == 1.0
    assert locked.description == "Locked by reviewer"
    assert locked.metadata["is_override"] is True
    assert candidate_to_locator(locked) is descriptor
    assert build_locked_candidate(RefLocator("e7")).strategy_type == "ref"
    assert build_locked_candidate(SelectorLocator("#save")).strategy_type == "css"
