from __future__ import annotations

from dataclasses import dataclass
import logging

from .action_catalog import action_label, is_inert_action
from .duration import parse_duration
from .errors import NoLocatorAvailable
from .locator_emit import DEFAULT_PAGE_VAR, comment_text, format_number, quote, resolve_locator_code
from .models import (
    EmitOptions,
    ExplorationLockfile,
    ExplorationStep,
    GeneratedTest,
    ReviewData,
    ReviewStep,
    ScreenshotDirective,
    SpecAction,
    VerifyCheck,
)
from .override_logic import effective_locator, effective_masks
from .visual_checks import (
    VisualCheckEmitOptions,
    generate_screenshot_assertion,
    generate_screenshot_capture,
    generate_wait_for_animations,
)

logger = logging.getLogger("flowcodify.compiler")

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_WAIT_MS = 1000
DEFAULT_SCREENSHOTS_DIR = "screenshots"

STEP_INDENT = "    "
BODY_INDENT = "      "
RULE = "// " + "─" * 73
BANNER = "═" * 75


@dataclass(frozen=True, slots=True)
class TestGeneratorOptions:
    __test__ = False

    include_visual_checks: bool = True
    baselines_dir: str | None = None
    include_comments: bool = True
    timeout: int = DEFAULT_TIMEOUT_MS
    page_var: str = DEFAULT_PAGE_VAR
    # Defaults to the lockfile timestamp so repeated runs stay byte-identical.
    generated_at: str | None = None


def title_from_spec_name(spec_name: str) -> str:
    """``login-flow`` -> ``Login Flow``."""
    return " ".join(word[:1].upper() + word[1:] for word in spec_name.split("-"))


def output_path_for(spec_name: str) -> str:
    return f"tests/{spec_name}.spec.ts"


class PlaywrightGenerator:
    """Compiles an exploration lockfile into a Playwright test file."""

    def __init__(self, options: TestGeneratorOptions | None = None) -> None:
        self.options = options or TestGeneratorOptions()
        self.page = self.options.page_var or DEFAULT_PAGE_VAR

    def generate(self, lockfile: ExplorationLockfile, review: ReviewData | None = None) -> GeneratedTest:
        generated_at = self.options.generated_at or lockfile.timestamp
        if review is not None and review.exploration_id and review.exploration_id != lockfile.exploration_id:
            logger.warning(
                "Review %s does not match exploration %s",
                review.exploration_id,
                lockfile.exploration_id,
            )

        blocks = [
            self.generate_step_block(step, position, _review_step(review, step))
            for position, step in enumerate(lockfile.steps)
        ]
        outcomes = [
            f"{STEP_INDENT}// Outcome: {comment_text(check.check)} = {_display(check.expected)}"
            for check in lockfile.outcome_checks
            if check.passed
        ]

        lines = self._header_lines(lockfile, review, generated_at)
        fixture = "{ page }" if self.page == DEFAULT_PAGE_VAR else f"{{ page: {self.page} }}"
        lines.append(f"test.describe({quote(lockfile.spec_name)}, () => {{")
        lines.append(f"  test({quote(title_from_spec_name(lockfile.spec_name))}, async ({fixture}) => {{")
        for block in blocks:
            lines.append(block)
            lines.append("")
        if outcomes:
            lines.append(f"{STEP_INDENT}// Final outcome verifications")
            lines.extend(outcomes)
        lines.append("  });")
        lines.append("});")

        logger.info(
            "Compiled %s: %d steps, %d outcome checks",
            lockfile.spec_name,
            len(blocks),
            len(outcomes),
        )
        return GeneratedTest(
            path=output_path_for(lockfile.spec_name),
            content="\n".join(lines) + "\n",
            spec_name=lockfile.spec_name,
            exploration_id=lockfile.exploration_id,
            generated_at=generated_at,
        )

    def generate_step_block(
        self,
        step: ExplorationStep,
        position: int,
        review_step: ReviewStep | None = None,
    ) -> str:
        action = step.spec_action
        step_name = action.description or f"step_{position}"
        body = self.generate_action_code(step, review_step)

        lines = [f"{STEP_INDENT}await test.step({quote(step_name)}, async () => {{"]
        if self.options.include_comments:
            lines.append(f"{BODY_INDENT}{RULE}")
            lines.append(f"{BODY_INDENT}// Step {position}: {comment_text(describe_action(action))}")
            if step.execution.method:
                lines.append(f"{BODY_INDENT}// Found via: {comment_text(step.execution.method)}")
            lines.append(f"{BODY_INDENT}{RULE}")
        lines.extend(f"{BODY_INDENT}{line}" if line else "" for line in body)
        lines.append(f"{STEP_INDENT}}});")
        return "\n".join(lines)

    def generate_action_code(self, step: ExplorationStep, review_step: ReviewStep | None = None) -> list[str]:
        action = step.spec_action
        kind = action.action
        page = self.page

        if is_inert_action(kind):
            logger.debug("Step %s (%s) has no runtime equivalent", step.step_index, kind)
            return [_inert_marker(action)]

        if kind == "navigate":
            url = action.to or step.execution.url_used or "/"
            return [f"await {page}.goto({quote(url)});"]
        if kind == "back":
            return [f"await {page}.goBack();"]
        if kind == "forward":
            return [f"await {page}.goForward();"]
        if kind in ("refresh", "reload"):
            return [f"await {page}.reload();"]
        if kind == "click":
            return [f"await {self._locator(step, review_step)}.click();"]
        if kind == "select":
            return [f"await {self._locator(step, review_step)}.selectOption({quote(action.option or '')});"]
        if kind == "check":
            call = "check" if action.checked is not False else "uncheck"
            return [f"await {self._locator(step, review_step)}.{call}();"]
        if kind == "uncheck":
            return [f"await {self._locator(step, review_step)}.uncheck();"]
        if kind == "scroll_into_view":
            return [f"await {self._locator(step, review_step)}.scrollIntoViewIfNeeded();"]
        if kind == "fill":
            value = _first_present(step.execution.value_used, action.value, "")
            return [f"await {self._locator(step, review_step)}.fill({quote(value)});"]
        if kind == "type":
            locator = self._locator(step, review_step)
            value = _first_present(step.execution.value_used, action.value, "")
            lines = [f"await {locator}.pressSequentially({quote(value)});"]
            if action.press_enter:
                lines.append(f"await {locator}.press('Enter');")
            return lines
        if kind == "press":
            return [self._press_code(step, review_step)]
        if kind == "wait":
            return self._wait_code(step, review_step)
        if kind == "verify_state":
            return [line for check in action.checks for line in self._verify_lines(check)]
        if kind == "screenshot":
            return self._screenshot_code(step, review_step)

        return [_inert_marker(action)]

    def _locator(self, step: ExplorationStep, review_step: ReviewStep | None) -> str:
        descriptor = effective_locator(step, review_step)
        fallback = step.execution.selector_used or step.spec_action.selector
        try:
            return resolve_locator_code(descriptor, fallback, EmitOptions(page_var=self.page))
        except NoLocatorAvailable as exc:
            raise NoLocatorAvailable(step.step_index) from exc

    def _has_target(self, step: ExplorationStep, review_step: ReviewStep | None) -> bool:
        return bool(
            effective_locator(step, review_step) is not None
            or step.execution.selector_used
            or step.spec_action.selector
        )

    def _press_code(self, step: ExplorationStep, review_step: ReviewStep | None) -> str:
        key = quote(step.spec_action.key or step.spec_action.value or "Enter")
        if self._has_target(step, review_step):
            return f"await {self._locator(step, review_step)}.press({key});"
        return f"await {self.page}.keyboard.press({key});"

    def _wait_code(self, step: ExplorationStep, review_step: ReviewStep | None) -> list[str]:
        action = step.spec_action
        page = self.page
        timeout = self._timeout(action)

        if action.for_ == "element":
            if action.selector:
                return [f"await {page}.locator({quote(action.selector)}).waitFor({{ timeout: {timeout} }});"]
            if self._has_target(step, review_step):
                return [f"await {self._locator(step, review_step)}.waitFor({{ timeout: {timeout} }});"]
        elif action.for_ == "text" and action.text:
            return [f"await {page}.getByText({quote(action.text)}).waitFor({{ timeout: {timeout} }});"]
        elif action.for_ == "url" and action.contains:
            return [
                f"await {page}.waitForURL(url => url.href.includes({quote(action.contains)}), "
                f"{{ timeout: {timeout} }});"
            ]
        elif action.for_ == "time":
            if action.duration is not None:
                duration = parse_duration(action.duration)
            else:
                recorded = step.execution.duration_ms
                duration = recorded if recorded is not None else DEFAULT_WAIT_MS
            return [f"await {page}.waitForTimeout({duration});"]

        return [f"await {page}.waitForLoadState('networkidle');"]

    def _timeout(self, action: SpecAction) -> int:
        if action.timeout is None:
            return self.options.timeout
        return parse_duration(action.timeout)

    def _verify_lines(self, check: VerifyCheck) -> list[str]:
        page = self.page
        lines: list[str] = []
        if check.element_visible:
            lines.append(f"await expect({page}.locator({quote(check.element_visible)})).toBeVisible();")
        if check.element_not_visible:
            lines.append(f"await expect({page}.locator({quote(check.element_not_visible)})).not.toBeVisible();")
        if check.text_contains:
            lines.append(f"await expect({page}.getByText({quote(check.text_contains)})).toBeVisible();")
        if check.text_not_contains:
            lines.append(f"await expect({page}.getByText({quote(check.text_not_contains)})).not.toBeVisible();")
        if check.url_contains:
            lines.append(f"await expect({page}).toHaveURL(new RegExp({quote(check.url_contains)}));")
        if check.element_count is not None:
            count = check.element_count
            lines.append(
                f"await expect({page}.locator({quote(count.selector)})).toHaveCount({count.expected});"
            )
        if check.attribute is not None:
            attribute = check.attribute
            lines.append(
                f"await expect({page}.locator({quote(attribute.selector)}))"
                f".toHaveAttribute({quote(attribute.attribute)}, {quote(attribute.equals)});"
            )
        return lines

    def _screenshot_code(self, step: ExplorationStep, review_step: ReviewStep | None) -> list[str]:
        name = step.spec_action.name or "screenshot"
        masks = effective_masks(step, review_step)

        if not self.options.include_visual_checks:
            capture = generate_screenshot_capture(
                ScreenshotDirective(name=name, mask=masks),
                VisualCheckEmitOptions(
                    page_var=self.page,
                    baselines_path=self.options.baselines_dir or DEFAULT_SCREENSHOTS_DIR,
                ),
            )
            return capture.split("\n")

        assertion = generate_screenshot_assertion(
            ScreenshotDirective(name=name, mask=masks, animations="disabled"),
            VisualCheckEmitOptions(page_var=self.page, include_comments=self.options.include_comments),
        )
        wait = generate_wait_for_animations(self.page)
        if not self.options.include_comments:
            wait = "\n".join(line for line in wait.split("\n") if not line.startswith("//"))
        return [*wait.split("\n"), "", *assertion.split("\n")]

    def _header_lines(
        self,
        lockfile: ExplorationLockfile,
        review: ReviewData | None,
        generated_at: str,
    ) -> list[str]:
        lines = [
            "import { test, expect } from '@playwright/test';",
            "",
            "/**",
            f" * Generated Test: {comment_text(lockfile.spec_name)}",
            f" * {BANNER}",
            f" * Spec: {comment_text(lockfile.spec_path)}",
            f" * Exploration: {comment_text(lockfile.exploration_id)}",
        ]
        if review is not None and review.reviewer:
            lines.append(
                f" * Approved by: {comment_text(review.reviewer)} @ {comment_text(review.submitted_at or '')}"
            )
        lines.extend(
            (
                f" * Generated: {comment_text(generated_at)}",
                " *",
                " * This test was generated from an approved exploration. Do not edit manually.",
                " * To update, re-run exploration and get new approval.",
                f" * {BANNER}",
                " */",
                "",
            )
        )
        return lines


def describe_action(action: SpecAction) -> str:
    kind = action.action
    target = action.query or action.selector
    if kind == "click":
        return f"Click: {target or 'element'}"
    if kind == "navigate":
        return f"Navigate to: {action.to or '/'}"
    if kind in ("fill", "type"):
        return f"{action_label(kind)}: {target or 'input'}"
    if kind == "wait":
        return f"Wait for: {action.for_ or 'condition'}"
    if kind == "screenshot":
        return f"Screenshot: {action.name or 'unnamed'}"
    if kind == "verify_state":
        return "Verify state"
    if kind == "select":
        return f"Select: {action.option or 'option'}"
    if kind == "check":
        return f"Checkbox: {'uncheck' if action.checked is False else 'check'}"
    if kind in ("uncheck", "scroll_into_view"):
        return f"{action_label(kind)}: {target or 'element'}"
    if kind == "press":
        return f"Press: {action.key or action.value or 'Enter'}"
    return kind


def generate_test(
    lockfile: ExplorationLockfile,
    options: TestGeneratorOptions | None = None,
    review: ReviewData | None = None,
) -> GeneratedTest:
    return PlaywrightGenerator(options).generate(lockfile, review)


def _inert_marker(action: SpecAction) -> str:
    kind = action.action
    if kind == "identify_element":
        subject = action.query or action.description or "element"
        return f"// identify_element: {comment_text(subject)} (resolved during exploration)"
    if kind == "ai_verify":
        subject = action.question or action.description or "check"
        return f"// ai_verify: {comment_text(subject)} (verified during exploration)"
    if kind == "custom":
        subject = action.name or action.description
        return f"// custom: {comment_text(subject)}" if subject else "// custom step"
    return f"// Unsupported action: {comment_text(kind)}"


def _review_step(review: ReviewData | None, step: ExplorationStep) -> ReviewStep | None:
    if review is None:
        return None
    return review.step(step.step_index)


def _first_present(*values: str | None) -> str:
    for value in values:
        if value is not None:
            return value
    return ""


def _display(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if value is None:
        return "undefined"
    return comment_text(str(value))
