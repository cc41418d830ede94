"""Checks on object metadata."""

from __future__ import annotations

import re
from typing import Any, Mapping

from kubegrade.scorecard import Grade, TestScore

_LABEL_VALUE_RE = re.compile(r"(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?")
_INVALID_SUMMARY = "Invalid label value"
_INVALID_DESCRIPTION = "The label value is invalid, and will not be accepted by Kubernetes"


def _is_valid(value: Any) -> bool:
    return isinstance(value, str) and _LABEL_VALUE_RE.fullmatch(value) is not None


def validate_label_values(meta: Mapping[str, Any]) -> TestScore:
    """Flag label values that Kubernetes would reject."""
    labels = (meta.get("metadata") or {}).get("labels") or {}
    invalid = [key for key, value in labels.items() if not _is_valid(value)]
    result = TestScore(grade=Grade.CRITICAL if invalid else Grade.ALL_OK)
    for key in invalid:
        result.add_comment(key, _INVALID_SUMMARY, _INVALID_DESCRIPTION)
    return result