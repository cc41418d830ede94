"""Kubernetes label selector matching."""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping

_NAME_RE = re.compile(r"([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]")
_DNS1123_SUBDOMAIN_RE = re.compile(
    r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*"
)
_NAME_MAX = 63
_PREFIX_MAX = 253

_OPERATORS = ("In", "NotIn", "Exists", "DoesNotExist")


class InvalidSelectorError(ValueError):
    """Raised when a label selector cannot be turned into requirements."""


def _validate_key(key: Any) -> None:
    if not isinstance(key, str):
        raise InvalidSelectorError(f"label key {key!r} is not a string")
    parts = key.split("/")
    if len(parts) == 1:
        name = parts[0]
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix:
            raise InvalidSelectorError(f"label key {key!r} has an empty prefix")
        if len(prefix) > _PREFIX_MAX or not _DNS1123_SUBDOMAIN_RE.fullmatch(prefix):
            raise InvalidSelectorError(f"label key {key!r} has an invalid prefix")
    else:
        raise InvalidSelectorError(f"label key {key!r} is not a qualified name")
    if not name or len(name) > _NAME_MAX or not _NAME_RE.fullmatch(name):
        raise InvalidSelectorError(f"label key {key!r} has an invalid name")


def _validate_value(value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidSelectorError(f"label value {value!r} is not a string")
    if value and (len(value) > _NAME_MAX or not _NAME_RE.fullmatch(value)):
        raise InvalidSelectorError(f"label value {value!r} is invalid")


def _requirement(key: Any, operator: Any, values: list) -> Callable[[Mapping[str, str]], bool]:
    _validate_key(key)
    if operator in ("In", "NotIn"):
        if not values:
            raise InvalidSelectorError(
                f"values must be non-empty for operator {operator} on key {key!r}"
            )
    elif operator in ("Exists", "DoesNotExist"):
        if values:
            raise InvalidSelectorError(
                f"values must be empty for operator {operator} on key {key!r}"
            )
    elif operator == "=":
        if len(values) != 1:
            raise InvalidSelectorError(f"exactly one value is required for key {key!r}")
    else:
        raise InvalidSelectorError(f"{operator!r} is not a valid label selector operator")
    for value in values:
        _validate_value(value)

    allowed = frozenset(values)
    if operator in ("In", "="):
        return lambda labels: key in labels and labels[key] in allowed
    if operator == "NotIn":
        return lambda labels: key not in labels or labels[key] not in allowed
    if operator == "Exists":
        return lambda labels: key in labels
    return lambda labels: key not in labels


def selector_matches(
    selector: Mapping[str, Any] | None, labels: Mapping[str, str] | None
) -> bool:
    """Whether a ``LabelSelector`` (``matchLabels``/``matchExpressions``) selects ``labels``.

    A missing selector selects nothing; an empty one selects everything.
    Raises :class:`InvalidSelectorError` for a malformed selector.
    """
    if selector is None:
        return False
    match_labels = selector.get("matchLabels") or {}
    expressions = selector.get("matchExpressions") or []
    if not match_labels and not expressions:
        return True

    requirements = [_requirement(k, "=", [v]) for k, v in match_labels.items()]
    for expression in expressions:
        requirements.append(
            _requirement(
                expression.get("key"),
                expression.get("operator"),
                list(expression.get("values") or []),
            )
        )

    labels = labels or {}
    return all(requirement(labels) for requirement in requirements)


def selector_matches_labels(
    selector_labels: Mapping[str, str] | None, labels: Mapping[str, str] | None
) -> bool:
    """Match a plain ``key: value`` selector; an invalid selector matches nothing."""
    try:
        return selector_matches({"matchLabels": selector_labels}, labels)
    except InvalidSelectorError:
        return False