"""Checks on HorizontalPodAutoscalers."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from kubegrade.scorecard import Grade, TestScore

_Ref = tuple[str, ...]


def _reference(api_version: Any, kind: Any, name: Any, namespace: Any) -> _Ref:
    return tuple(value or "" for value in (api_version, kind, name, namespace))


def _object_reference(obj: Mapping[str, Any]) -> _Ref:
    metadata = obj.get("metadata") or {}
    return _reference(
        obj.get("apiVersion"), obj.get("kind"), metadata.get("name"), metadata.get("namespace")
    )


def hpa_has_target(
    all_targetable_objects: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that the HPA's scaleTargetRef names a known object in its namespace."""
    known = {_object_reference(obj) for obj in all_targetable_objects or ()}

    def check(hpa: Mapping[str, Any]) -> TestScore:
        target = (hpa.get("spec") or {}).get("scaleTargetRef") or {}
        wanted = _reference(
            target.get("apiVersion"),
            target.get("kind"),
            target.get("name"),
            (hpa.get("metadata") or {}).get("namespace"),
        )
        if wanted in known:
            return TestScore(grade=Grade.ALL_OK)
        result = TestScore(grade=Grade.CRITICAL)
        result.add_comment("", "The HPA target does not match anything", "")
        return result

    return check