"""Checks on pod topology spread constraints."""

from __future__ import annotations

from typing import Any, Mapping

from kubegrade.scorecard import Grade, TestScore

_SUMMARY = "Pod Topology Spread Constraints"
_VALID_WHEN_UNSATISFIABLE = ("DoNotSchedule", "ScheduleAnyway")


def _problem(spread: Mapping[str, Any]) -> str | None:
    if spread.get("labelSelector") is None:
        return (
            "No labelSelector detected. A label selector is needed determine the number of "
            "pods in a topology domain"
        )
    if not spread.get("maxSkew"):
        return "MaxSkew is set to zero. This is not allowed."
    min_domains = spread.get("minDomains")
    if min_domains is not None and min_domains == 0:
        return (
            "MaxDomain set to zero. This is not allowed. Constraint behaves if minDomains is "
            "set to 1 if nil"
        )
    if not spread.get("topologyKey"):
        return (
            "TopologyKey is not set. This is the key of node labels used to bucket nodes "
            "into a domain"
        )
    if spread.get("whenUnsatisfiable") not in _VALID_WHEN_UNSATISFIABLE:
        return "Invalid WhenUnsatisfiable setting detected"
    return None


def pod_topology_spread_constraints(pod_template: Mapping[str, Any]) -> TestScore:
    """Validate each topology spread constraint; the first invalid one fails the check."""
    score = TestScore()
    spreads = (pod_template.get("spec") or {}).get("topologySpreadConstraints")
    if spreads is None:
        score.grade = Grade.ALL_OK
        score.add_comment(
            "",
            _SUMMARY,
            "No Pod Topology Spread Constraints set, kube-scheduler defaults assumed",
        )
        return score

    for spread in spreads:
        problem = _problem(spread or {})
        if problem is not None:
            score.grade = Grade.CRITICAL
            score.add_comment("", _SUMMARY, problem)
            return score

    score.grade = Grade.ALL_OK
    score.add_comment("", _SUMMARY, _SUMMARY)
    return score