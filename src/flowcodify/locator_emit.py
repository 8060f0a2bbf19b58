from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Mapping

from .errors import MissingLocatorTarget, MissingRequiredArgument, NoLocatorAvailable, UnknownLocatorMethod
from .models import EmitOptions, LocatorDescriptor, MethodLocator, RefLocator, SelectorLocator

DEFAULT_PAGE_VAR = "page"


@dataclass(frozen=True, slots=True)
class LocatorMethodSpec:
    name: str
    required: str
    optional: tuple[str, ...] = ()
    # getByRole forwards every remaining arg as an option.
    open_options: bool = False
    # Plain string first argument; text-like methods also accept regex payloads.
    string_only: bool = False


LOCATOR_METHODS: dict[str, LocatorMethodSpec] = {
    spec.name: spec
    for spec in (
        LocatorMethodSpec("getByRole", "role", ("name", "exact"), open_options=True, string_only=True),
        LocatorMethodSpec("getByText", "text", ("exact",)),
        LocatorMethodSpec("getByLabel", "text", ("exact",)),
        LocatorMethodSpec("getByPlaceholder", "text", ("exact",)),
        LocatorMethodSpec("getByTestId", "testId", string_only=True),
        LocatorMethodSpec("getByAltText", "text", ("exact",)),
        LocatorMethodSpec("getByTitle", "text", ("exact",)),
        LocatorMethodSpec("locator", "selector", string_only=True),
    )
}

_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)


def escape_string(value: str) -> str:
    """Escape ``value`` for a single-quoted TypeScript string literal."""
    escaped = value
    for raw, replacement in _ESCAPES:
        escaped = escaped.replace(raw, replacement)
    return escaped


def quote(value: str) -> str:
    return f"'{escape_string(value)}'"


def comment_text(value: str) -> str:
    """Flatten ``value`` so it cannot leave a ``//`` line or a ``/** */`` block.

    Line breaks become their escape sequences, including the JavaScript
    line terminators U+2028 and U+2029.
    """
    text = escape_string(value).replace("\\'", "'")
    text = text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")
    return text.replace("*/", "* /")


def format_value(value: Any) -> str:
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if value is None:
        return "undefined"
    if isinstance(value, Mapping) and "regex" in value:
        pattern = str(value["regex"]).replace("/", "\\/")
        return f"/{pattern}/{value.get('flags') or ''}"
    return json.dumps(value, sort_keys=True)


def format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def generate_locator_code(descriptor: LocatorDescriptor | None, options: EmitOptions | None = None) -> str:
    """Emit a Playwright locator expression for ``descriptor``.

    >>> generate_locator_code(SelectorLocator("button.primary"))
    "page.locator('button.primary')"
    """
    opts = options or EmitOptions()
    base = opts.page_var or DEFAULT_PAGE_VAR
    if opts.within is not None:
        base = generate_locator_code(opts.within, EmitOptions(page_var=base))

    if isinstance(descriptor, MethodLocator):
        code = _method_locator_code(descriptor.method, descriptor.args, base)
    elif isinstance(descriptor, SelectorLocator):
        code = f"{base}.locator({quote(descriptor.selector)})"
    elif isinstance(descriptor, RefLocator):
        code = f"{base}.locator('[data-ref=\"{escape_string(descriptor.ref)}\"]')"
    else:
        raise MissingLocatorTarget()

    return code + _index_suffix(opts)


def resolve_locator_code(
    descriptor: LocatorDescriptor | None,
    fallback_selector: str | None = None,
    options: EmitOptions | None = None,
) -> str:
    """Prefer a method locator, then a selector locator, then the raw fallback selector."""
    if isinstance(descriptor, (MethodLocator, SelectorLocator)):
        return generate_locator_code(descriptor, options)
    if fallback_selector:
        return generate_locator_code(SelectorLocator(fallback_selector), options)
    raise NoLocatorAvailable()


def selector_to_locator(selector: str) -> SelectorLocator:
    return SelectorLocator(selector)


def role_locator(role: str, name: str | None = None, exact: bool | None = None) -> MethodLocator:
    args: dict[str, Any] = {"role": role}
    if name is not None:
        args["name"] = name
    if exact is not None:
        args["exact"] = exact
    return MethodLocator("getByRole", args)


def text_locator(text: str, exact: bool | None = None) -> MethodLocator:
    args: dict[str, Any] = {"text": text}
    if exact is not None:
        args["exact"] = exact
    return MethodLocator("getByText", args)


def testid_locator(test_id: str) -> MethodLocator:
    return MethodLocator("getByTestId", {"testId": test_id})


def _method_locator_code(method: str, args: Mapping[str, Any] | None, base: str) -> str:
    spec = LOCATOR_METHODS.get(method)
    if spec is None:
        raise UnknownLocatorMethod(method)

    values = dict(args or {})
    required = values.get(spec.required)
    if required is None or (spec.name == "getByRole" and not required):
        raise MissingRequiredArgument(method, spec.required)

    first = quote(str(required)) if spec.string_only else format_value(required)

    if spec.open_options:
        option_keys = [key for key in values if key != spec.required]
    else:
        option_keys = [key for key in spec.optional if key in values]
    options = _format_options({key: values[key] for key in option_keys})

    if options:
        return f"{base}.{method}({first}, {options})"
    return f"{base}.{method}({first})"


def _format_options(options: Mapping[str, Any]) -> str:
    parts = [f"{key}: {format_value(value)}" for key, value in options.items() if value is not None]
    if not parts:
        return ""
    return "{ " + ", ".join(parts) + " }"


def _index_suffix(options: EmitOptions) -> str:
    if options.nth is not None:
        if options.nth == 0:
            return ".first()"
        if options.nth == -1:
            return ".last()"
        return f".nth({options.nth})"
    if options.chain_first:
        return ".first()"
    return ""
