from flowcodify.models import Region, RegionMask, ScreenshotDirective, SelectorMask
from flowcodify.visual_checks import (
    VisualCheckEmitOptions,
    generate_element_screenshot_assertion,
    generate_mask_array,
    generate_mask_setup_code,
    generate_screenshot_assertion,
    generate_screenshot_capture,
    generate_screenshot_compare,
    generate_visual_imports,
    generate_wait_for_animations,
)


def _mixed_masks() -> tuple:
    return (
        SelectorMask(".a"),
        RegionMask(Region(x=10, y=20, width=30, height=40)),
        RegionMask(Region(x=50, y=5, width=10, height=10)),
    )


def test_mask_setup_only_counts_region_entries() -> None:
    setup = generate_mask_setup_code(_mixed_masks())
    lines = setup.split("\n")
    assert len(lines) == 2
    assert all(line.startswith("await page.evaluate(() => {") for line in lines)
    assert "div.setAttribute('data-bf-mask', '0')" in lines[0]
    assert "left:10%; top:20%; width:30%; height:40%;" in lines[0]
    assert "div.setAttribute('data-bf-mask', '1')" in lines[1]
    assert "pointer-events:none" in lines[1]


def test_mask_array_preserves_mixed_order() -> None:
    assert generate_mask_array(_mixed_masks()) == (
        "[page.locator('.a'), "
        "page.locator('[data-bf-mask=\"0\"]'), "
        "page.locator('[data-bf-mask=\"1\"]')]"
    )


def test_setup_is_empty_without_region_masks() -> None:
    assert generate_mask_setup_code([SelectorMask(".ad")]) == ""
    assert generate_mask_setup_code([]) == ""


def test_assertion_without_options_takes_single_argument() -> None:
    code = generate_screenshot_assertion(ScreenshotDirective(name="home"))
    assert code == "await expect(page).toHaveScreenshot('home.png');"


def test_assertion_option_order() -> None:
    directive = ScreenshotDirective(
        name="dash.png",
        mask=(SelectorMask(".clock"),),
        max_diff_pixel_ratio=0.01,
        threshold=0.2,
        animations="disabled",
        full_page=True,
        timeout=5000,
    )
    code = generate_screenshot_assertion(directive)
    assert code == (
        "await expect(page).toHaveScreenshot('dash.png', { maxDiffPixelRatio: 0.01, threshold: 0.2, "
        "animations: 'disabled', fullPage: true, timeout: 5000, mask: [page.locator('.clock')] });"
    )


def test_assertion_prepends_overlay_setup_and_comment() -> None:
    code = generate_screenshot_assertion(
        ScreenshotDirective(name="cart", mask=_mixed_masks()),
        VisualCheckEmitOptions(include_comments=True),
    )
    lines = code.split("\n")
    assert lines[0] == "// Visual check: cart"
    assert lines[1].startswith("await page.evaluate(")
    assert lines[2].startswith("await page.evaluate(")
    assert lines[3].startswith("await expect(page).toHaveScreenshot('cart.png', { mask: [")


def test_element_assertion_targets_locator() -> None:
    code = generate_element_screenshot_assertion(
        "page.getByTestId('card')",
        ScreenshotDirective(name="card"),
    )
    assert code == "await expect(page.getByTestId('card')).toHaveScreenshot('card.png');"


def test_capture_builds_path_from_baselines() -> None:
    directive = ScreenshotDirective(name="home", full_page=True)
    with_dir = generate_screenshot_capture(directive, VisualCheckEmitOptions(baselines_path="baselines"))
    without_dir = generate_screenshot_capture(directive)
    assert with_dir == "await page.screenshot({ path: 'baselines/home.png', fullPage: true });"
    assert without_dir == "await page.screenshot({ path: 'home.png', fullPage: true });"


def test_custom_page_variable() -> None:
    code = generate_screenshot_assertion(
        ScreenshotDirective(name="x", mask=(RegionMask(Region(0, 0, 100, 10)),)),
        VisualCheckEmitOptions(page_var="tab"),
    )
    assert code.startswith("await tab.evaluate(")
    assert "toHaveScreenshot('x.png', { mask: [tab.locator('[data-bf-mask=\"0\"]')] });" in code


def test_compare_snippet_uses_threshold() -> None:
    snippet = generate_screenshot_compare("out/a.png", "base/a.png")
    assert "fs.readFile('out/a.png')" in snippet
    assert snippet.endswith("expect(diffPixelRatio).toBeLessThanOrEqual(0.05);")
    assert generate_screenshot_compare("a", "b", threshold=0.1).endswith("toBeLessThanOrEqual(0.1);")


def test_wait_for_animations() -> None:
    assert generate_wait_for_animations("p").split("\n")[1:] == [
        "await p.waitForLoadState('networkidle');",
        "await p.waitForTimeout(500);",
    ]


def test_visual_imports() -> None:
    assert generate_visual_imports() == "import { expect } from '@playwright/test';"


def test_comment_names_are_flattened_to_one_line() -> None:
    directive = ScreenshotDirective(name="home\nboom")
    emit_options = VisualCheckEmitOptions(include_comments=True)
    assert generate_screenshot_assertion(directive, emit_options).split("\n")[0] == "// Visual check: home\\nboom"
    assert generate_element_screenshot_assertion("page.locator('#x')", directive, emit_options).split("\n")[0] == (
        "// Visual check (element): home\\nboom"
    )
    capture = generate_screenshot_capture(directive, emit_options).split("\n")
    assert capture == [
        "// Capture screenshot: home\\nboom",
        "await page.screenshot({ path: 'home\\nboom.png' });",
    ]
