"""Checks on container and pod security contexts."""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from kubegrade.scorecard import Grade, TestScore

SECCOMP_ANNOTATION = "seccomp.security.alpha.kubernetes.io/defaultProfileName"
_MIN_ID = 10000


def _all_containers(pod_template: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    spec = pod_template.get("spec") or {}
    yield from spec.get("initContainers") or []
    yield from spec.get("containers") or []


def _name(container: Mapping[str, Any]) -> str:
    return container.get("name") or ""


def container_security_context_read_only_root_filesystem(
    pod_template: Mapping[str, Any],
) -> TestScore:
    """Require a security context with readOnlyRootFilesystem on every container."""
    score = TestScore()
    failed = False
    for container in _all_containers(pod_template):
        context = container.get("securityContext")
        if context is None:
            failed = True
            score.add_comment(
                _name(container),
                "Container has no configured security context",
                "Set securityContext to run the container in a more secure context.",
            )
            continue
        if not context.get("readOnlyRootFilesystem"):
            failed = True
            score.add_comment(
                _name(container),
                "The pod has a container with a writable root filesystem",
                "Set securityContext.readOnlyRootFilesystem to true",
            )
    score.grade = Grade.CRITICAL if failed else Grade.ALL_OK
    return score


def container_security_context_privileged(pod_template: Mapping[str, Any]) -> TestScore:
    """Reject privileged containers."""
    score = TestScore()
    privileged = False
    for container in _all_containers(pod_template):
        context = container.get("securityContext") or {}
        if context.get("privileged"):
            privileged = True
            score.add_comment(
                _name(container),
                "The container is privileged",
                "Set securityContext.privileged to false. Privileged containers can access all "
                "devices on the host, and grants almost the same access as non-containerized "
                "processes on the host.",
            )
    score.grade = Grade.CRITICAL if privileged else Grade.ALL_OK
    return score


def container_security_context_user_group_id(pod_template: Mapping[str, Any]) -> TestScore:
    """Require every container to run with a user and group ID of at least 10000.

    Values missing on the container are taken from the pod's security context.
    """
    score = TestScore()
    pod_context = (pod_template.get("spec") or {}).get("securityContext")
    failed = False
    for container in _all_containers(pod_template):
        context = container.get("securityContext")
        if context is None and pod_context is None:
            failed = True
            score.add_comment(
                _name(container),
                "Container has no configured security context",
                "Set securityContext to run the container in a more secure context.",
            )
            continue
        context = context or {}
        pod_context_values = pod_context or {}
        run_as_user = context.get("runAsUser")
        if run_as_user is None:
            run_as_user = pod_context_values.get("runAsUser")
        run_as_group = context.get("runAsGroup")
        if run_as_group is None:
            run_as_group = pod_context_values.get("runAsGroup")

        if run_as_user is None or run_as_user < _MIN_ID:
            failed = True
            score.add_comment(
                _name(container),
                "The container is running with a low user ID",
                "A userid above 10 000 is recommended to avoid conflicts with the host. "
                "Set securityContext.runAsUser to a value > 10000",
            )
        if run_as_group is None or run_as_group < _MIN_ID:
            failed = True
            score.add_comment(
                _name(container),
                "The container running with a low group ID",
                "A groupid above 10 000 is recommended to avoid conflicts with the host. "
                "Set securityContext.runAsGroup to a value > 10000",
            )
    score.grade = Grade.CRITICAL if failed else Grade.ALL_OK
    return score


def pod_seccomp_profile(pod_template: Mapping[str, Any]) -> TestScore:
    """Warn when the pod has no default seccomp profile annotation."""
    score = TestScore()
    metadata = pod_template.get("metadata") or {}
    annotations = metadata.get("annotations") or {}
    if SECCOMP_ANNOTATION in annotations:
        score.grade = Grade.ALL_OK
    else:
        score.grade = Grade.WARNING
        score.add_comment(
            metadata.get("name") or "",
            "The pod has not configured Seccomp for its containers",
            "Running containers with Seccomp is recommended to reduce the kernel attack surface",
        )
    return score