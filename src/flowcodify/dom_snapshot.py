from __future__ import annotations

from typing import Any, Iterable, Mapping

from .models import DomSnapshot, ElementInfo


def element_from_payload(payload: Mapping[str, Any], ref: str | None = None) -> ElementInfo:
    """Build an ``ElementInfo`` from one snapshot entry.

    Accepts both snake_case and the camelCase keys emitted by the browser
    session (``ariaLabel``, ``testId``, ``className``, ``tagName``). An
    accessibility-tree entry that only carries ``name`` uses it as the
    visible text.
    """
    attributes = {
        str(key): str(value)
        for key, value in dict(payload.get("attributes") or {}).items()
        if value is not None
    }
    resolved_ref = ref if ref is not None else _text(payload.get("ref"))
    tag = _text(payload.get("tag")) or _text(payload.get("tagName")) or ""
    text = _text(payload.get("text"))
    if text is None and "tag" not in payload and "tagName" not in payload:
        text = _text(payload.get("name"))

    class_name = _text(payload.get("class_name")) or _text(payload.get("className"))
    if class_name is None:
        class_name = _text(attributes.get("class"))

    return ElementInfo(
        ref=(resolved_ref or "").lstrip("@"),
        tag=tag.lower(),
        role=_text(payload.get("role")),
        text=text,
        aria_label=_text(payload.get("aria_label")) or _text(payload.get("ariaLabel")),
        test_id=_text(payload.get("test_id")) or _text(payload.get("testId")),
        class_name=class_name,
        id=_text(payload.get("id")) or _text(attributes.get("id")),
        attributes=attributes,
    )


def snapshot_from_payload(payload: Mapping[str, Any] | Iterable[Any] | DomSnapshot | None) -> DomSnapshot:
    """Normalize the shapes a snapshot arrives in.

    ``{"elements": [...]}``, ``{"tree": ..., "refs": {ref: {...}}}`` and a
    bare list of entries are all accepted. Enumeration order is list order,
    or insertion order of the ``refs`` mapping.
    """
    if payload is None:
        return DomSnapshot()
    if isinstance(payload, DomSnapshot):
        return payload

    if isinstance(payload, Mapping):
        tree = str(payload.get("tree") or "")
        refs = payload.get("refs")
        if isinstance(refs, Mapping):
            elements = tuple(
                _coerce_element(entry, ref=str(ref)) for ref, entry in refs.items() if entry is not None
            )
            return DomSnapshot(elements=elements, tree=tree)
        entries = payload.get("elements") or ()
        return DomSnapshot(elements=tuple(_coerce_element(entry) for entry in entries), tree=tree)

    return DomSnapshot(elements=tuple(_coerce_element(entry) for entry in payload))


def _coerce_element(entry: Any, ref: str | None = None) -> ElementInfo:
    if isinstance(entry, ElementInfo):
        return entry
    if isinstance(entry, Mapping):
        return element_from_payload(entry, ref=ref)
    raise TypeError(f"Unsupported snapshot entry: {type(entry).__name__}")


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
