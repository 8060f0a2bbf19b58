from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .locator_emit import quote
from .models import GeneratedConfig

BrowserName = Literal["chromium", "firefox", "webkit"]

CONFIG_PATH = "playwright.config.ts"

DEVICE_NAMES: dict[str, str] = {
    "chromium": "Desktop Chrome",
    "firefox": "Desktop Firefox",
    "webkit": "Desktop Safari",
}


@dataclass(frozen=True, slots=True)
class PlaywrightProject:
    name: str
    browser_name: str = "chromium"
    viewport: tuple[int, int] | None = None

    @property
    def device_name(self) -> str:
        return DEVICE_NAMES.get(self.browser_name, DEVICE_NAMES["chromium"])


@dataclass(frozen=True, slots=True)
class WebServer:
    command: str
    url: str


DEFAULT_PROJECTS: tuple[PlaywrightProject, ...] = (
    PlaywrightProject("chromium", "chromium"),
    PlaywrightProject("firefox", "firefox"),
    PlaywrightProject("webkit", "webkit"),
)


@dataclass(frozen=True, slots=True)
class PlaywrightConfigOptions:
    timeout: int = 30000
    retries: int = 2
    workers: int = 4
    reporter: str = "html"
    projects: tuple[PlaywrightProject, ...] = field(default=DEFAULT_PROJECTS)
    web_server: WebServer | None = None


@dataclass(frozen=True, slots=True)
class ConfigGeneratorOptions:
    base_url: str | None = None
    test_dir: str = "./tests"
    output_dir: str | None = None
    config: PlaywrightConfigOptions = field(default_factory=PlaywrightConfigOptions)
    generated_at: str | None = None


def generate_playwright_config(options: ConfigGeneratorOptions | None = None) -> GeneratedConfig:
    """Render a full ``playwright.config.ts`` with one project per browser."""
    opts = options or ConfigGeneratorOptions()
    config = opts.config

    lines = [
        "import { defineConfig, devices } from '@playwright/test';",
        "",
        "/**",
        " * Playwright configuration for generated tests.",
    ]
    if opts.generated_at:
        lines.append(f" * Generated: {opts.generated_at}")
    lines.extend(
        (
            " */",
            "export default defineConfig({",
            f"  testDir: {quote(opts.test_dir)},",
        )
    )
    if opts.output_dir:
        lines.append(f"  outputDir: {quote(opts.output_dir)},")
    lines.extend(
        (
            "",
            "  /* Run tests in files in parallel */",
            "  fullyParallel: true,",
            "",
            "  /* Fail the build on CI if you accidentally left test.only in the source code */",
            "  forbidOnly: !!process.env.CI,",
            "",
            "  /* Retry on CI only */",
            f"  retries: process.env.CI ? {config.retries} : 0,",
            "",
            "  /* Opt out of parallel tests on CI */",
            f"  workers: process.env.CI ? 1 : {config.workers},",
            "",
            "  /* Reporter to use */",
            f"  reporter: {quote(config.reporter)},",
            "",
            "  /* Shared settings for all the projects below */",
            "  use: {",
        )
    )
    if opts.base_url:
        lines.append("    /* Base URL to use in actions like `await page.goto('/')` */")
        lines.append(f"    baseURL: {quote(opts.base_url)},")
        lines.append("")
    lines.extend(
        (
            "    /* Collect trace when retrying the failed test */",
            "    trace: 'on-first-retry',",
            "",
            "    /* Take screenshot on failure */",
            "    screenshot: 'only-on-failure',",
            "  },",
            "",
            "  /* Test timeout */",
            f"  timeout: {config.timeout},",
            "",
            "  /* Configure projects for major browsers */",
            "  projects: [",
        )
    )
    for project in config.projects:
        lines.append("    {")
        lines.append(f"      name: {quote(project.name)},")
        lines.append("      use: {")
        lines.append(f"        ...devices[{quote(project.device_name)}],")
        if project.viewport is not None:
            width, height = project.viewport
            lines.append(f"        viewport: {{ width: {width}, height: {height} }},")
        lines.append("      },")
        lines.append("    },")
    lines.append("  ],")
    if config.web_server is not None:
        lines.extend(
            (
                "",
                "  /* Run your local dev server before starting the tests */",
                "  webServer: {",
                f"    command: {quote(config.web_server.command)},",
                f"    url: {quote(config.web_server.url)},",
                "    reuseExistingServer: !process.env.CI,",
                "  },",
            )
        )
    lines.append("});")
    return GeneratedConfig(path=CONFIG_PATH, content="\n".join(lines) + "\n")


def generate_minimal_config(
    base_url: str | None = None,
    test_dir: str = "./tests",
    browser: BrowserName = "chromium",
) -> GeneratedConfig:
    device_name = DEVICE_NAMES.get(browser, DEVICE_NAMES["chromium"])
    use_lines = ["  use: {"]
    if base_url:
        use_lines.append(f"    baseURL: {quote(base_url)},")
    use_lines.append("    trace: 'on-first-retry',")
    use_lines.append("  },")

    lines = [
        "import { defineConfig, devices } from '@playwright/test';",
        "",
        "export default defineConfig({",
        f"  testDir: {quote(test_dir)},",
        "  fullyParallel: true,",
        "  forbidOnly: !!process.env.CI,",
        "  retries: process.env.CI ? 2 : 0,",
        "  workers: process.env.CI ? 1 : undefined,",
        "  reporter: 'html',",
        *use_lines,
        "  projects: [",
        "    {",
        f"      name: {quote(browser)},",
        f"      use: {{ ...devices[{quote(device_name)}] }},",
        "    },",
        "  ],",
        "});",
    ]
    return GeneratedConfig(path=CONFIG_PATH, content="\n".join(lines) + "\n")


def generate_playwright_scripts() -> dict[str, str]:
    return {
        "test:e2e": "playwright test",
        "test:e2e:headed": "playwright test --headed",
        "test:e2e:debug": "playwright test --debug",
        "test:e2e:ui": "playwright test --ui",
        "test:e2e:update-snapshots": "playwright test --update-snapshots",
    }


def generate_setup_instructions() -> str:
    return "\n".join(
        (
            "# Install Playwright",
            "npm install -D @playwright/test",
            "",
            "# Install browsers",
            "npx playwright install",
            "",
            "# Run tests",
            "npm run test:e2e",
            "",
        )
    )
