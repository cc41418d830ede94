"""Scores collected per Kubernetes object, and the annotation rules that skip checks."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

IGNORED_CHECKS_ANNOTATION = "kube-score/ignore"
OPTIONAL_CHECKS_ANNOTATION = "kube-score/enable"

# Ignoring the key check also ignores every check listed for it.
IMPLIED_IGNORE_ANNOTATIONS: dict[str, tuple[str, ...]] = {
    "container-resources": ("container-ephemeral-storage-request-and-limit",),
}


class Grade(enum.IntEnum):
    """How well an object did on a check; higher is better."""

    CRITICAL = 1
    WARNING = 5
    ALMOST_OK = 7
    ALL_OK = 10

    def __str__(self) -> str:
        if self is Grade.CRITICAL:
            return "CRITICAL"
        if self is Grade.WARNING:
            return "WARNING"
        return "OK"


@dataclass(frozen=True)
class Check:
    """Description of a single check."""

    name: str
    id: str
    target_type: str = ""
    comment: str = ""
    optional: bool = False


@dataclass
class TestScoreComment:
    """One remark attached to a score."""

    __test__ = False

    path: str = ""
    summary: str = ""
    description: str = ""
    documentation_url: str = ""


@dataclass
class TestScore:
    """The outcome of running one check against one object."""

    __test__ = False

    check: Check | None = None
    grade: Grade | None = None
    skipped: bool = False
    comments: list[TestScoreComment] = field(default_factory=list)

    def add_comment(
        self, path: str, summary: str, description: str, documentation_url: str = ""
    ) -> None:
        """Append a comment to the score."""
        self.comments.append(
            TestScoreComment(
                path=path,
                summary=summary,
                description=description,
                documentation_url=documentation_url,
            )
        )


def _csv_contains(csv: str | None, key: str) -> bool:
    for item in (csv or "").split(","):
        item = item.strip()
        if item == key or key in IMPLIED_IGNORE_ANNOTATIONS.get(item, ()):
            return True
    return False


def _ref_key(type_meta: Mapping[str, Any], object_meta: Mapping[str, Any]) -> str:
    return "/".join(
        (
            type_meta.get("kind") or "",
            type_meta.get("apiVersion") or "",
            object_meta.get("namespace") or "",
            object_meta.get("name") or "",
        )
    )


@dataclass
class ScoredObject:
    """All scores recorded for one Kubernetes object."""

    type_meta: dict[str, Any]
    object_meta: dict[str, Any]
    file_location: Any = None
    checks: list[TestScore] = field(default_factory=list)
    use_ignore_checks_annotation: bool = False
    use_optional_checks_annotation: bool = False
    enabled_optional_tests: frozenset[str] = frozenset()

    def any_below_or_equal_to_grade(self, threshold: Grade) -> bool:
        """True if a non-skipped score is at or below ``threshold``."""
        return any(
            not score.skipped and (score.grade is None or score.grade <= threshold)
            for score in self.checks
        )

    def human_friendly_ref(self) -> str:
        """A readable reference such as ``name/namespace apiVersion/Kind``."""
        ref = self.object_meta.get("name") or ""
        namespace = self.object_meta.get("namespace") or ""
        if namespace:
            ref += "/" + namespace
        api_version = self.type_meta.get("apiVersion") or ""
        kind = self.type_meta.get("kind") or ""
        return f"{ref} {api_version}/{kind}"

    def is_enabled(
        self,
        check: Check,
        annotations: Mapping[str, str] | None,
        child_annotations: Mapping[str, str] | None = None,
    ) -> bool:
        """Decide from the annotations whether ``check`` should run."""
        if child_annotations is not None:
            if self.use_ignore_checks_annotation and _csv_contains(
                child_annotations.get(IGNORED_CHECKS_ANNOTATION), check.id
            ):
                return False
            if self.use_optional_checks_annotation and _csv_contains(
                child_annotations.get(OPTIONAL_CHECKS_ANNOTATION), check.id
            ):
                return True
        annotations = annotations or {}
        if self.use_ignore_checks_annotation and _csv_contains(
            annotations.get(IGNORED_CHECKS_ANNOTATION), check.id
        ):
            return False
        if self.use_optional_checks_annotation and _csv_contains(
            annotations.get(OPTIONAL_CHECKS_ANNOTATION), check.id
        ):
            return True
        return not check.optional

    def add(self, score: TestScore, check: Check, file_location: Any, *args) -> None:
        """Record ``score`` for ``check``.

        ``args`` holds the object's annotations, optionally followed by the
        annotations of its pod template; a check disabled by them is kept as
        skipped.
        """
        score.check = check
        self.file_location = file_location

        skip = False
        if len(args) == 1:
            skip = not self.is_enabled(check, args[0], None)
        elif len(args) == 2:
            skip = not self.is_enabled(check, args[0], args[1])

        if skip:
            score.skipped = True
            score.comments = [
                TestScoreComment(summary=f"Skipped because {check.id} is ignored")
            ]

        self.checks.append(score)


class Scorecard(dict):
    """Scored objects keyed by kind, apiVersion, namespace and name."""

    def new_object(
        self,
        type_meta: Mapping[str, Any],
        object_meta: Mapping[str, Any],
        use_ignore_checks_annotation: bool = False,
        use_optional_checks_annotation: bool = False,
        enabled_optional_tests=None,
    ) -> ScoredObject:
        """Return the object for this reference, creating it if it is new."""
        key = _ref_key(type_meta, object_meta)
        existing = self.get(key)
        if existing is not None:
            return existing
        scored = ScoredObject(
            type_meta=dict(type_meta),
            object_meta=dict(object_meta),
            use_ignore_checks_annotation=use_ignore_checks_annotation,
            use_optional_checks_annotation=use_optional_checks_annotation,
            enabled_optional_tests=frozenset(enabled_optional_tests or ()),
        )
        self[key] = scored
        return scored

    def any_below_or_equal_to_grade(self, threshold: Grade) -> bool:
        """True if any object has a non-skipped score at or below ``threshold``."""
        return any(o.any_below_or_equal_to_grade(threshold) for o in self.values())