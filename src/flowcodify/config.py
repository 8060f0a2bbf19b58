from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import logging
from pathlib import Path
import tempfile

from .candidates import DEFAULT_MAX_CANDIDATES, CandidateResolver
from .locator_emit import DEFAULT_PAGE_VAR
from .playwright_ts import DEFAULT_TIMEOUT_MS, TestGeneratorOptions

CONFIG_DIR = Path.home() / ".flowcodify"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

logger = logging.getLogger("flowcodify.config")


@dataclass(slots=True)
class GeneratorConfig:
    include_visual_checks: bool = True
    include_comments: bool = True
    baselines_dir: str = ""
    timeout: int = DEFAULT_TIMEOUT_MS
    page_var: str = DEFAULT_PAGE_VAR
    max_candidates: int = DEFAULT_MAX_CANDIDATES

    def to_options(self, generated_at: str | None = None) -> TestGeneratorOptions:
        return TestGeneratorOptions(
            include_visual_checks=self.include_visual_checks,
            baselines_dir=self.baselines_dir or None,
            include_comments=self.include_comments,
            timeout=self.timeout,
            page_var=self.page_var or DEFAULT_PAGE_VAR,
            generated_at=generated_at,
        )

    def to_resolver(self) -> CandidateResolver:
        return CandidateResolver(max_candidates=self.max_candidates)


def load_generator_config(config_path: Path | None = None) -> GeneratorConfig:
    path = config_path or CONFIG_PATH
    if not path.exists() or not path.is_file():
        return GeneratorConfig()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, TypeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return GeneratorConfig()

    if not isinstance(payload, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return GeneratorConfig()

    defaults = GeneratorConfig()
    return GeneratorConfig(
        include_visual_checks=bool(payload.get("include_visual_checks", defaults.include_visual_checks)),
        include_comments=bool(payload.get("include_comments", defaults.include_comments)),
        baselines_dir=str(payload.get("baselines_dir", "") or ""),
        timeout=_positive_int(payload.get("timeout"), defaults.timeout),
        page_var=str(payload.get("page_var", "") or defaults.page_var),
        max_candidates=_positive_int(payload.get("max_candidates"), defaults.max_candidates),
    )


def save_generator_config(config: GeneratorConfig, config_path: Path | None = None) -> tuple[bool, str | None]:
    path = config_path or CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return False, f"Could not create config folder: {exc}"

    payload = json.dumps(asdict(config), ensure_ascii=True, indent=2, sort_keys=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            handle.write(payload)
            handle.flush()
            temp_path = Path(handle.name)

        temp_path.replace(path)
    except OSError as exc:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False, f"Could not write generator config: {exc}"

    return True, None


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the ``flowcodify`` logger once."""
    root = logging.getLogger("flowcodify")
    root.setLevel(level)
    if root.handlers:
        return root

    root.propagate = False
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return root


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
