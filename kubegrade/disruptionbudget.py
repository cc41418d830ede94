"""Checks that workloads are covered by PodDisruptionBudgets."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from kubegrade.labels import selector_matches
from kubegrade.scorecard import Grade, TestScore

_NO_BUDGET_DESCRIPTION = (
    "It's recommended to define a PodDisruptionBudget to avoid unexpected downtime during "
    "Kubernetes maintenance operations, such as when draining a node. "
)

WorkloadCheck = Callable[[Mapping[str, Any]], TestScore]


def _namespace(obj: Mapping[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("namespace") or ""


def has_matching(
    budgets: Iterable[Mapping[str, Any]] | None,
    namespace: str,
    labels: Mapping[str, str] | None,
) -> tuple[bool, str]:
    """Whether a budget in ``namespace`` selects ``labels``.

    Returns the answer and, when only budgets in other namespaces match, a
    note naming those namespaces. Raises
    :class:`~kubegrade.labels.InvalidSelectorError` for a malformed selector.
    """
    other_namespaces: list[str] = []
    for budget in budgets or ():
        selector = (budget.get("spec") or {}).get("selector")
        if not selector_matches(selector, labels):
            continue
        budget_namespace = _namespace(budget)
        if budget_namespace != namespace:
            other_namespaces.append(budget_namespace)
            continue
        return True, ""

    if other_namespaces:
        return False, (
            "A matching budget was found, but in a different namespace. "
            f"expected='{namespace}' got='[{' '.join(other_namespaces)}]'"
        )
    return False, ""


def _workload_has(budgets: list[Mapping[str, Any]], kind: str) -> WorkloadCheck:
    def check(workload: Mapping[str, Any]) -> TestScore:
        score = TestScore()
        spec = workload.get("spec") or {}
        replicas = spec.get("replicas")
        if replicas is not None and replicas < 2:
            score.skipped = True
            score.add_comment("", f"Skipped because the {kind} has less than 2 replicas", "")
            return score

        template_labels = ((spec.get("template") or {}).get("metadata") or {}).get("labels")
        match, note = has_matching(budgets, _namespace(workload), template_labels)
        if match:
            score.grade = Grade.ALL_OK
        else:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "", "No matching PodDisruptionBudget was found", _NO_BUDGET_DESCRIPTION + note
            )
        return score

    return check


def stateful_set_has(budgets: Iterable[Mapping[str, Any]] | None) -> WorkloadCheck:
    """Build a check that a StatefulSet with 2+ replicas is targeted by a budget."""
    return _workload_has(list(budgets or ()), "statefulset")


def deployment_has(budgets: Iterable[Mapping[str, Any]] | None) -> WorkloadCheck:
    """Build a check that a Deployment with 2+ replicas is targeted by a budget."""
    return _workload_has(list(budgets or ()), "deployment")


def has_policy(pdb: Mapping[str, Any]) -> TestScore:
    """Require minAvailable or maxUnavailable on a PodDisruptionBudget."""
    score = TestScore()
    spec = pdb.get("spec") or {}
    if spec.get("minAvailable") is None and spec.get("maxUnavailable") is None:
        score.add_comment(
            "",
            "PodDisruptionBudget missing policy",
            "PodDisruptionBudget should specify minAvailable or maxUnavailable.",
        )
        score.grade = Grade.CRITICAL
    else:
        score.grade = Grade.ALL_OK
    return score