"""Checks that pods use safe readiness and liveness probes."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Mapping

from kubegrade.labels import selector_matches_labels
from kubegrade.scorecard import Grade, TestScore

PROBES_DOCUMENTATION_URL = "README_PROBES.md"

_BATCH_KINDS = ("CronJob", "Job")


def _all_containers(pod_template: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    spec = pod_template.get("spec") or {}
    yield from spec.get("initContainers") or []
    yield from spec.get("containers") or []


def _api_group(api_version: str) -> str:
    parts = api_version.split("/")
    if len(parts) == 2:
        return parts[0]
    return ""


def _port_int_value(port: Any) -> int:
    if isinstance(port, bool):
        return 0
    if isinstance(port, int):
        return port
    try:
        return int(str(port))
    except ValueError:
        return 0


def _probes_identical(readiness: Mapping[str, Any], liveness: Mapping[str, Any]) -> bool:
    identical = False

    r_http, l_http = readiness.get("httpGet"), liveness.get("httpGet")
    if r_http is not None and l_http is not None:
        if (r_http.get("path") or "") == (l_http.get("path") or "") and _port_int_value(
            r_http.get("port")
        ) == _port_int_value(l_http.get("port")):
            identical = True

    r_tcp, l_tcp = readiness.get("tcpSocket"), liveness.get("tcpSocket")
    if r_tcp is not None and l_tcp is not None:
        if r_tcp.get("port") == l_tcp.get("port"):
            identical = True

    r_exec, l_exec = readiness.get("exec"), liveness.get("exec")
    if r_exec is not None and l_exec is not None:
        if list(r_exec.get("command") or []) == list(l_exec.get("command") or []):
            identical = True

    return identical


def pod_is_targeted_by_service(pod: Mapping[str, Any], service: Mapping[str, Any]) -> bool:
    """Whether ``service`` selects the pod template ``pod`` in the same namespace."""
    pod_meta = pod.get("metadata") or {}
    service_meta = service.get("metadata") or {}
    if (pod_meta.get("namespace") or "") != (service_meta.get("namespace") or ""):
        return False
    return selector_matches_labels(
        (service.get("spec") or {}).get("selector"),
        pod_meta.get("labels") or {},
    )


def container_probes(
    all_services: Iterable[Mapping[str, Any]] | None,
) -> Callable[..., TestScore]:
    """Build a check of the probes of a pod template.

    One probe of each type anywhere in the pod is enough, and a readinessProbe
    is only required when a Service targets the pod. The returned check takes
    the pod template and, optionally, the owning object's type metadata
    (``kind`` and ``apiVersion``).
    """
    services = list(all_services or ())

    def check(
        pod_template: Mapping[str, Any], type_meta: Mapping[str, Any] | None = None
    ) -> TestScore:
        score = TestScore()
        type_meta = type_meta or {}
        kind = type_meta.get("kind") or ""
        if kind in _BATCH_KINDS and _api_group(type_meta.get("apiVersion") or "") == "batch":
            score.grade = Grade.ALL_OK
            return score

        has_readiness = False
        has_liveness = False
        identical = False
        for container in _all_containers(pod_template):
            readiness = container.get("readinessProbe")
            liveness = container.get("livenessProbe")
            if readiness is not None:
                has_readiness = True
            if liveness is not None:
                has_liveness = True
            if readiness is not None and liveness is not None and _probes_identical(
                readiness, liveness
            ):
                identical = True

        targeted = any(pod_is_targeted_by_service(pod_template, s) for s in services)

        if has_liveness and has_readiness and identical:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "",
                "Container has the same readiness and liveness probe",
                "Using the same probe for liveness and readiness is very likely dangerous. "
                "Generally it's better to avoid the livenessProbe than re-using the readinessProbe.",
                PROBES_DOCUMENTATION_URL,
            )
            return score

        if not targeted:
            score.grade = Grade.ALL_OK
            score.add_comment(
                "", "The pod is not targeted by a service, skipping probe checks.", ""
            )
            return score

        if not has_readiness:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "",
                "Container is missing a readinessProbe",
                "A readinessProbe should be used to indicate when the service is ready to receive "
                "traffic. Without it, the Pod is risking to receive traffic before it has booted. "
                "It's also used during rollouts, and can prevent downtime if a new version of the "
                "application is failing.",
                PROBES_DOCUMENTATION_URL,
            )
            return score

        if not has_liveness:
            score.grade = Grade.ALMOST_OK
            score.add_comment(
                "",
                "Container is missing a livenessProbe",
                "A livenessProbe can be used to restart the container if it's deadlocked or has "
                "crashed without exiting. It's only recommended to setup a livenessProbe if you "
                "really need one.",
                PROBES_DOCUMENTATION_URL,
            )
            return score

        score.grade = Grade.ALL_OK
        return score

    return check