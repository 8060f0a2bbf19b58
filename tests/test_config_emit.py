from flowcodify.config_emit import (
    ConfigGeneratorOptions,
    PlaywrightConfigOptions,
    PlaywrightProject,
    WebServer,
    generate_minimal_config,
    generate_playwright_config,
    generate_playwright_scripts,
    generate_setup_instructions,
)


def test_default_config_lists_three_browsers() -> None:
    config = generate_playwright_config()
    assert config.path == "playwright.config.ts"
    assert "testDir: './tests'," in config.content
    assert "retries: process.env.CI ? 2 : 0," in config.content
    assert "workers: process.env.CI ? 1 : 4," in config.content
    assert "timeout: 30000," in config.content
    for device in ("Desktop Chrome", "Desktop Firefox", "Desktop Safari"):
        assert f"...devices['{device}']," in config.content
    assert "baseURL" not in config.content
    assert "webServer" not in config.content


def test_config_with_base_url_projects_and_web_server() -> None:
    options = ConfigGeneratorOptions(
        base_url="http://localhost:3000",
        output_dir="test-results",
        config=PlaywrightConfigOptions(
            timeout=60000,
            projects=(PlaywrightProject("mobile-safari", "webkit", viewport=(390, 844)),),
            web_server=WebServer(command="npm run dev", url="http://localhost:3000"),
        ),
        generated_at="2026-03-01T00:00:00Z",
    )
    content = generate_playwright_config(options).content
    assert " * Generated: 2026-03-01T00:00:00Z" in content
    assert "outputDir: 'test-results'," in content
    assert "baseURL: 'http://localhost:3000'," in content
    assert "name: 'mobile-safari'," in content
    assert "viewport: { width: 390, height: 844 }," in content
    assert "command: 'npm run dev'," in content
    assert content.index("projects: [") < content.index("webServer: {")
    assert content.endswith("});\n")


def test_minimal_config_for_single_browser() -> None:
    content = generate_minimal_config(base_url="https://shop.test", browser="firefox").content
    assert "name: 'firefox'," in content
    assert "use: { ...devices['Desktop Firefox'] }," in content
    assert "baseURL: 'https://shop.test'," in content
    assert "baseURL" not in generate_minimal_config().content


def test_scripts_and_setup_instructions() -> None:
    scripts = generate_playwright_scripts()
    assert scripts["test:e2e"] == "playwright test"
    assert scripts["test:e2e:update-snapshots"] == "playwright test --update-snapshots"
    assert "npx playwright install" in generate_setup_instructions()
