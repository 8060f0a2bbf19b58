from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .locator_emit import DEFAULT_PAGE_VAR, comment_text, escape_string, format_number, quote
from .models import MaskRegion, RegionMask, ScreenshotDirective, SelectorMask

MASK_ATTRIBUTE = "data-bf-mask"
DEFAULT_COMPARE_THRESHOLD = 0.05


@dataclass(frozen=True, slots=True)
class VisualCheckEmitOptions:
    page_var: str = DEFAULT_PAGE_VAR
    baselines_path: str | None = None
    include_comments: bool = False


def normalize_screenshot_name(name: str) -> str:
    return name if name.endswith(".png") else f"{name}.png"


def generate_screenshot_assertion(
    directive: ScreenshotDirective,
    emit_options: VisualCheckEmitOptions | None = None,
) -> str:
    """Emit ``await expect(page).toHaveScreenshot(...)`` preceded by any region-mask overlays."""
    opts = emit_options or VisualCheckEmitOptions()
    lines: list[str] = []
    if opts.include_comments and directive.name:
        lines.append(f"// Visual check: {comment_text(directive.name)}")
    lines.extend(_setup_lines(directive.mask, opts.page_var))
    lines.append(_assertion_statement(opts.page_var, directive, opts.page_var))
    return "\n".join(lines)


def generate_element_screenshot_assertion(
    locator_code: str,
    directive: ScreenshotDirective,
    emit_options: VisualCheckEmitOptions | None = None,
) -> str:
    opts = emit_options or VisualCheckEmitOptions()
    lines: list[str] = []
    if opts.include_comments and directive.name:
        lines.append(f"// Visual check (element): {comment_text(directive.name)}")
    lines.extend(_setup_lines(directive.mask, opts.page_var))
    lines.append(_assertion_statement(locator_code, directive, opts.page_var))
    return "\n".join(lines)


def generate_screenshot_capture(
    directive: ScreenshotDirective,
    emit_options: VisualCheckEmitOptions | None = None,
) -> str:
    opts = emit_options or VisualCheckEmitOptions()
    lines: list[str] = []
    if opts.include_comments and directive.name:
        lines.append(f"// Capture screenshot: {comment_text(directive.name)}")
    lines.extend(_setup_lines(directive.mask, opts.page_var))

    screenshot_name = normalize_screenshot_name(directive.name)
    path = f"{opts.baselines_path}/{screenshot_name}" if opts.baselines_path else screenshot_name
    parts = [f"path: {quote(path)}"]
    if directive.full_page is not None:
        parts.append(f"fullPage: {_bool(directive.full_page)}")
    if directive.animations:
        parts.append(f"animations: {quote(directive.animations)}")
    if directive.mask:
        parts.append(f"mask: {generate_mask_array(directive.mask, opts.page_var)}")

    lines.append(f"await {opts.page_var}.screenshot({{ {', '.join(parts)} }});")
    return "\n".join(lines)


def generate_mask_array(masks: Sequence[MaskRegion], page_var: str = DEFAULT_PAGE_VAR) -> str:
    """Mask locators in input order; region masks point at their overlay by region-only index."""
    items: list[str] = []
    region_index = 0
    for mask in masks:
        if isinstance(mask, SelectorMask):
            items.append(f"{page_var}.locator({quote(mask.selector)})")
        elif isinstance(mask, RegionMask):
            items.append(f"{page_var}.locator('[{MASK_ATTRIBUTE}=\"{region_index}\"]')")
            region_index += 1
    return f"[{', '.join(items)}]"


def generate_mask_setup_code(masks: Sequence[MaskRegion], page_var: str = DEFAULT_PAGE_VAR) -> str:
    """Inject one fixed, non-interactive overlay ``div`` per region mask.

    Returns an empty string when ``masks`` holds no region entries.
    """
    return "\n".join(_setup_lines(masks, page_var))


def generate_screenshot_compare(
    actual_path: str,
    expected_path: str,
    threshold: float = DEFAULT_COMPARE_THRESHOLD,
) -> str:
    return "\n".join(
        (
            "// Compare screenshots",
            f"const actualBuffer = await fs.readFile({quote(actual_path)});",
            f"const expectedBuffer = await fs.readFile({quote(expected_path)});",
            "const { diffPixelRatio } = await compareImages(actualBuffer, expectedBuffer);",
            f"expect(diffPixelRatio).toBeLessThanOrEqual({format_number(threshold)});",
        )
    )


def generate_visual_imports() -> str:
    return "import { expect } from '@playwright/test';"


def generate_wait_for_animations(page_var: str = DEFAULT_PAGE_VAR) -> str:
    return "\n".join(
        (
            "// Wait for animations to complete",
            f"await {page_var}.waitForLoadState('networkidle');",
            f"await {page_var}.waitForTimeout(500);",
        )
    )


def _setup_lines(masks: Sequence[MaskRegion], page_var: str) -> list[str]:
    regions = [mask.region for mask in masks if isinstance(mask, RegionMask)]
    lines: list[str] = []
    for index, region in enumerate(regions):
        style = (
            "position:fixed; pointer-events:none; z-index:99999; "
            f"left:{format_number(region.x)}%; top:{format_number(region.y)}%; "
            f"width:{format_number(region.width)}%; height:{format_number(region.height)}%;"
        )
        lines.append(
            f"await {page_var}.evaluate(() => {{ "
            "const div = document.createElement('div'); "
            f"div.setAttribute('{MASK_ATTRIBUTE}', '{index}'); "
            f"div.style.cssText = '{escape_string(style)}'; "
            "document.body.appendChild(div); "
            "});"
        )
    return lines


def _assertion_statement(target: str, directive: ScreenshotDirective, page_var: str) -> str:
    screenshot_name = quote(normalize_screenshot_name(directive.name))
    options = _assertion_options(directive, page_var)
    if options:
        return f"await expect({target}).toHaveScreenshot({screenshot_name}, {options});"
    return f"await expect({target}).toHaveScreenshot({screenshot_name});"


def _assertion_options(directive: ScreenshotDirective, page_var: str) -> str:
    parts: list[str] = []
    if directive.max_diff_pixel_ratio is not None:
        parts.append(f"maxDiffPixelRatio: {format_number(directive.max_diff_pixel_ratio)}")
    if directive.threshold is not None:
        parts.append(f"threshold: {format_number(directive.threshold)}")
    if directive.animations:
        parts.append(f"animations: {quote(directive.animations)}")
    if directive.full_page is not None:
        parts.append(f"fullPage: {_bool(directive.full_page)}")
    if directive.timeout is not None:
        parts.append(f"timeout: {directive.timeout}")
    if directive.mask:
        parts.append(f"mask: {generate_mask_array(directive.mask, page_var)}")
    if not parts:
        return ""
    return "{ " + ", ".join(parts) + " }"


def _bool(value: bool) -> str:
    return "true" if value else "false"
