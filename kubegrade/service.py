"""Checks on Services."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Iterable, Mapping

from kubegrade.labels import selector_matches_labels
from kubegrade.scorecard import Grade, TestScore

_NODE_PORT_ADVICE = (
    "NodePort services should be avoided as they are insecure, and can not be used "
    "together with NetworkPolicies. LoadBalancers or use of an Ingress is recommended "
    "over NodePorts."
)


def _namespace(obj: Mapping[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("namespace") or ""


def _labels(obj: Mapping[str, Any]) -> Mapping[str, str]:
    return (obj.get("metadata") or {}).get("labels") or {}


def _pod_template(workload: Mapping[str, Any]) -> Mapping[str, Any]:
    spec = workload.get("spec") or {}
    if workload.get("kind") == "CronJob":
        spec = (spec.get("jobTemplate") or {}).get("spec") or {}
    return spec.get("template") or {}


def _single_finding(grade: Grade, summary: str, description: str) -> TestScore:
    finding = TestScore(grade=grade)
    finding.add_comment("", summary, description)
    return finding


def service_targets_pod(
    pods: Iterable[Mapping[str, Any]] | None,
    podspecers: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that a Service's selector matches a pod in its namespace."""
    labels_by_namespace: dict[str, list[Mapping[str, str]]] = defaultdict(list)
    for pod in pods or ():
        labels_by_namespace[_namespace(pod)].append(_labels(pod))
    for workload in podspecers or ():
        labels_by_namespace[_namespace(workload)].append(_labels(_pod_template(workload)))

    def check(service: Mapping[str, Any]) -> TestScore:
        spec = service.get("spec") or {}
        # ExternalName services have no selector.
        if spec.get("type") == "ExternalName" or any(
            selector_matches_labels(spec.get("selector"), labels)
            for labels in labels_by_namespace.get(_namespace(service), ())
        ):
            return TestScore(grade=Grade.ALL_OK)
        return _single_finding(Grade.CRITICAL, "The services selector does not match any pods", "")

    return check


def service_type(service: Mapping[str, Any]) -> TestScore:
    """Warn about NodePort services."""
    if (service.get("spec") or {}).get("type") != "NodePort":
        return TestScore(grade=Grade.ALL_OK)
    return _single_finding(Grade.WARNING, "The service is of type NodePort", _NODE_PORT_ADVICE)