from __future__ import annotations


class FlowcodifyError(Exception):
    """Base class for every error raised by flowcodify."""


class LocatorError(FlowcodifyError, ValueError):
    """Raised when a locator descriptor cannot be turned into code."""


class MissingLocatorTarget(LocatorError):
    def __init__(self) -> None:
        super().__init__("Locator must have either method+args, selector, or ref")


class MissingRequiredArgument(LocatorError):
    def __init__(self, method: str, arg: str) -> None:
        self.method = method
        self.arg = arg
        super().__init__(f"{method} requires a {arg} argument")


class UnknownLocatorMethod(LocatorError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown locator method: {name}")


class NoLocatorAvailable(LocatorError):
    def __init__(self, step_index: int | None = None) -> None:
        self.step_index = step_index
        message = "No locator or selector available"
        if step_index is not None:
            message = f"{message} for step {step_index}"
        super().__init__(message)


class InvalidDuration(FlowcodifyError, ValueError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f'Invalid duration "{value}". Use format like "3s", "2m", "500ms", or "1m30s"'
        )


class LockfileFormatError(FlowcodifyError, ValueError):
    """Raised when a lockfile or review payload has the wrong shape."""
