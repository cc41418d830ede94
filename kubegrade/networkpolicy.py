"""Checks that pods and NetworkPolicies refer to each other."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from kubegrade.labels import InvalidSelectorError, selector_matches
from kubegrade.scorecard import Grade, TestScore


def _pod_template(workload: Mapping[str, Any]) -> Mapping[str, Any]:
    spec = workload.get("spec") or {}
    if workload.get("kind") == "CronJob":
        spec = (spec.get("jobTemplate") or {}).get("spec") or {}
    return spec.get("template") or {}


def _meta(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _selects(netpol: Mapping[str, Any], labels: Mapping[str, str] | None) -> bool:
    selector = (netpol.get("spec") or {}).get("podSelector") or {}
    try:
        return selector_matches(selector, labels)
    except InvalidSelectorError:
        return False


def pod_has_network_policy(
    all_netpols: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that a pod template is covered by ingress and egress policies."""
    netpols = list(all_netpols or ())

    def check(pod_template: Mapping[str, Any]) -> TestScore:
        meta = _meta(pod_template)
        namespace = meta.get("namespace") or ""
        labels = meta.get("labels")
        has_ingress = False
        has_egress = False

        for netpol in netpols:
            if (_meta(netpol).get("namespace") or "") != namespace:
                continue
            if not _selects(netpol, labels):
                continue
            spec = netpol.get("spec") or {}
            policy_types = spec.get("policyTypes") or []
            # Without policyTypes every policy affects ingress, and egress only
            # if it has egress rules.
            if not policy_types:
                has_ingress = True
                if spec.get("egress"):
                    has_egress = True
            else:
                has_ingress = has_ingress or "Ingress" in policy_types
                has_egress = has_egress or "Egress" in policy_types

        score = TestScore()
        if has_ingress and has_egress:
            score.grade = Grade.ALL_OK
        elif has_egress:
            score.grade = Grade.WARNING
            score.add_comment(
                "",
                "The pod does not have a matching ingress NetworkPolicy",
                "Add a ingress policy to the pods NetworkPolicy",
            )
        elif has_ingress:
            score.grade = Grade.WARNING
            score.add_comment(
                "",
                "The pod does not have a matching egress NetworkPolicy",
                "Add a egress policy to the pods NetworkPolicy",
            )
        else:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "",
                "The pod does not have a matching NetworkPolicy",
                "Create a NetworkPolicy that targets this pod to control who/what can communicate "
                "with this pod. Note, this feature needs to be supported by the CNI implementation "
                "used in the Kubernetes cluster to have an effect.",
            )
        return score

    return check


def network_policy_targets_pod(
    pods: Iterable[Mapping[str, Any]] | None,
    podspecers: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that a NetworkPolicy selects at least one pod or pod template."""
    pod_list = list(pods or ())
    workloads = list(podspecers or ())

    def check(netpol: Mapping[str, Any]) -> TestScore:
        namespace = _meta(netpol).get("namespace") or ""
        has_match = any(
            (_meta(pod).get("namespace") or "") == namespace
            and _selects(netpol, _meta(pod).get("labels"))
            for pod in pod_list
        ) or any(
            (_meta(workload).get("namespace") or "") == namespace
            and _selects(netpol, _meta(_pod_template(workload)).get("labels"))
            for workload in workloads
        )

        score = TestScore()
        if has_match:
            score.grade = Grade.ALL_OK
        else:
            score.grade = Grade.CRITICAL
            score.add_comment("", "The NetworkPolicys selector doesn't match any pods", "")
        return score

    return check