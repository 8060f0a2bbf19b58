from flowcodify.models import (
    ExplorationLockfile,
    ExplorationStep,
    MethodLocator,
    ReviewData,
    ReviewStep,
    SpecAction,
    StepExecution,
)
from flowcodify.validation import validate_lockfile


def _lockfile(*steps: ExplorationStep) -> ExplorationLockfile:
    return ExplorationLockfile(
        spec_name="login",
        spec_path="specs/login.yaml",
        exploration_id="exp-1",
        timestamp="2026-02-01T00:00:00Z",
        steps=steps,
    )


def _step(index: int, action: SpecAction, execution: StepExecution | None = None) -> ExplorationStep:
    return ExplorationStep(step_index=index, spec_action=action, execution=execution or StepExecution())


def test_valid_lockfile_passes() -> None:
    lockfile = _lockfile(
        _step(0, SpecAction(action="navigate", to="/login")),
        _step(1, SpecAction(action="click"), StepExecution(selector_used="#submit")),
        _step(2, SpecAction(action="ai_verify", question="Is the user logged in?")),
    )
    result = validate_lockfile(lockfile)
    assert result.ok
    assert result.message == "Validation successful."


def test_click_without_any_locator_is_reported_with_step_index() -> None:
    lockfile = _lockfile(
        _step(0, SpecAction(action="navigate", to="/login")),
        _step(7, SpecAction(action="click", query="submit")),
    )
    result = validate_lockfile(lockfile)
    assert not result.ok
    assert result.step_index == 7
    assert result.message == "Step 1: No locator or selector available for step 7"


def test_malformed_locked_locator_fails_fast() -> None:
    lockfile = _lockfile(_step(0, SpecAction(action="click"), StepExecution(selector_used="#ok")))
    review = ReviewData(
        exploration_id="exp-1",
        steps=(ReviewStep(step_index=0, locked_locator=MethodLocator("getByRole", {"name": "Save"})),),
    )
    result = validate_lockfile(lockfile, review)
    assert not result.ok
    assert "getByRole requires a role argument" in result.message


def test_invalid_wait_duration_is_reported() -> None:
    lockfile = _lockfile(_step(0, SpecAction(action="wait", for_="time", duration="soon")))
    result = validate_lockfile(lockfile)
    assert not result.ok
    assert result.step_index == 0


def test_review_for_other_exploration_is_rejected() -> None:
    result = validate_lockfile(_lockfile(), ReviewData(exploration_id="exp-2"))
    assert not result.ok
    assert "exp-2" in result.message


def test_rejected_review_blocks_generation() -> None:
    result = validate_lockfile(_lockfile(), ReviewData(exploration_id="exp-1", verdict="rejected"))
    assert not result.ok
    assert result.message == "Exploration was rejected in review."
