from __future__ import annotations

from dataclasses import dataclass

from .errors import FlowcodifyError
from .models import ExplorationLockfile, ReviewData
from .playwright_ts import PlaywrightGenerator, TestGeneratorOptions


@dataclass(frozen=True, slots=True)
class GenerationValidation:
    ok: bool
    message: str
    step_index: int | None = None


def validate_lockfile(
    lockfile: ExplorationLockfile,
    review: ReviewData | None = None,
    options: TestGeneratorOptions | None = None,
) -> GenerationValidation:
    """Run every step through the compiler and report the first failure as a value."""
    if not lockfile.spec_name.strip():
        return GenerationValidation(False, "Spec name is required.")
    if review is not None and review.exploration_id and review.exploration_id != lockfile.exploration_id:
        return GenerationValidation(
            False,
            f"Review belongs to exploration {review.exploration_id}, not {lockfile.exploration_id}.",
        )
    if review is not None and review.verdict == "rejected":
        return GenerationValidation(False, "Exploration was rejected in review.")

    generator = PlaywrightGenerator(options)
    for position, step in enumerate(lockfile.steps):
        review_step = review.step(step.step_index) if review is not None else None
        try:
            generator.generate_step_block(step, position, review_step)
        except FlowcodifyError as exc:
            return GenerationValidation(False, f"Step {position}: {exc}", step.step_index)

    return GenerationValidation(True, "Validation successful.")
