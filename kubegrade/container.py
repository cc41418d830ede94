"""Checks on the containers of a pod template."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Mapping

from kubegrade.quantity import Quantity, parse_quantity
from kubegrade.scorecard import Grade, TestScore

_MAX_PORT_NAME_LENGTH = 15
_LATEST_TAGS = ("", "latest")
_EPHEMERAL = "ephemeral-storage"
_PORT_CHECK = "Container Port Check"

_LIMIT_ADVICE = "Resource limits are recommended to avoid resource DDOS. Set resources.limits."
_REQUEST_ADVICE = (
    "Resource requests are recommended to make sure that the application can start "
    "and run without crashing. Set resources.requests."
)
_EQUAL_ADVICE = (
    "Having equal requests and limits is recommended to avoid resource DDOS of the node "
    "during spikes. Set resources.requests.{0} == resources.limits.{0}"
)

PodCheck = Callable[[Mapping[str, Any]], TestScore]


def _all_containers(pod_template: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    spec = pod_template.get("spec") or {}
    yield from spec.get("initContainers") or []
    yield from spec.get("containers") or []


def _resource(container: Mapping[str, Any], section: str, name: str) -> Quantity:
    value = ((container.get("resources") or {}).get(section) or {}).get(name)
    return Quantity() if value is None else parse_quantity(value)


def _name(container: Mapping[str, Any]) -> str:
    return container.get("name") or ""


def _flag(
    result: TestScore, container: Mapping[str, Any], grade: Grade, summary: str, description: str
) -> None:
    """Record a finding for ``container`` and set the grade it implies."""
    result.add_comment(_name(container), summary, description)
    result.grade = grade


def container_resources(require_cpu_limit: bool, require_memory_limit: bool) -> PodCheck:
    """Build a check that requests and (optionally) limits are set on every container."""
    wanted = (
        ("limits", "cpu", "CPU limit is not set", require_cpu_limit),
        ("limits", "memory", "Memory limit is not set", require_memory_limit),
        ("requests", "cpu", "CPU request is not set", True),
        ("requests", "memory", "Memory request is not set", True),
    )
    rules = [(section, name, summary) for section, name, summary, required in wanted if required]

    def check(pod_template: Mapping[str, Any]) -> TestScore:
        result = TestScore()
        containers = list(_all_containers(pod_template))
        missing: set[str] = set()
        for container in containers:
            for section, name, summary in rules:
                if _resource(container, section, name).is_zero():
                    advice = _LIMIT_ADVICE if section == "limits" else _REQUEST_ADVICE
                    result.add_comment(_name(container), summary, advice + name)
                    missing.add(section)

        if not containers:
            result.grade = Grade.CRITICAL
            result.add_comment("", "No containers defined", "")
        elif "limits" in missing:
            result.grade = Grade.CRITICAL
        elif "requests" in missing:
            result.grade = Grade.WARNING
        else:
            result.grade = Grade.ALL_OK
        return result

    return check


def _requests_equal_limits(pod_template: Mapping[str, Any], name: str, label: str) -> TestScore:
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        if _resource(container, "requests", name) != _resource(container, "limits", name):
            _flag(
                result,
                container,
                Grade.CRITICAL,
                f"{label} requests does not match limits",
                _EQUAL_ADVICE.format(name),
            )
    return result


def container_cpu_requests_equal_limits(pod_template: Mapping[str, Any]) -> TestScore:
    """Require the CPU request of every container to equal its limit."""
    return _requests_equal_limits(pod_template, "cpu", "CPU")


def container_memory_requests_equal_limits(pod_template: Mapping[str, Any]) -> TestScore:
    """Require the memory request of every container to equal its limit."""
    return _requests_equal_limits(pod_template, "memory", "Memory")


def container_resource_requests_equal_limits(pod_template: Mapping[str, Any]) -> TestScore:
    """Require both CPU and memory requests to equal their limits."""
    result = TestScore(grade=Grade.ALL_OK)
    for partial in (
        container_cpu_requests_equal_limits(pod_template),
        container_memory_requests_equal_limits(pod_template),
    ):
        if partial.grade == Grade.CRITICAL:
            result.grade = Grade.CRITICAL
            result.comments.extend(partial.comments)
    return result


def container_tag(image: str) -> str:
    """The tag of ``image``, or an empty string if it has none."""
    parts = (image or "").split(":")
    return parts[-1] if len(parts) > 1 else ""


def container_image_tag(pod_template: Mapping[str, Any]) -> TestScore:
    """Reject images without a tag or tagged ``latest``."""
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        if container_tag(container.get("image") or "") in _LATEST_TAGS:
            _flag(
                result,
                container,
                Grade.CRITICAL,
                "Image with latest tag",
                "Using a fixed tag is recommended to avoid accidental upgrades",
            )
    return result


def container_image_pull_policy(pod_template: Mapping[str, Any]) -> TestScore:
    """Require imagePullPolicy Always, unless Kubernetes already defaults to it."""
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        policy = container.get("imagePullPolicy") or ""
        # An unset policy with an empty or latest tag already defaults to Always.
        if not policy and container_tag(container.get("image") or "") in _LATEST_TAGS:
            continue
        if policy != "Always":
            _flag(
                result,
                container,
                Grade.CRITICAL,
                "ImagePullPolicy is not set to Always",
                "It's recommended to always set the ImagePullPolicy to Always, to make sure that "
                "the imagePullSecrets are always correct, and to always get the image you want.",
            )
    return result


def container_storage_ephemeral_request_and_limit(pod_template: Mapping[str, Any]) -> TestScore:
    """Require ephemeral-storage requests and limits on every container."""
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        if _resource(container, "limits", _EPHEMERAL).is_zero():
            _flag(
                result,
                container,
                Grade.CRITICAL,
                "Ephemeral Storage limit is not set",
                _LIMIT_ADVICE + _EPHEMERAL,
            )
        elif _resource(container, "requests", _EPHEMERAL).is_zero():
            _flag(
                result,
                container,
                Grade.WARNING,
                "Ephemeral Storage request is not set",
                "Resource requests are recommended to make sure the application can start and run "
                "without crashing. Set resource.requests.ephemeral-storage",
            )
    return result


def container_storage_ephemeral_request_equals_limit(pod_template: Mapping[str, Any]) -> TestScore:
    """Require set ephemeral-storage requests to equal their limits."""
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        limit = _resource(container, "limits", _EPHEMERAL)
        request = _resource(container, "requests", _EPHEMERAL)
        if not limit.is_zero() and not request.is_zero() and request != limit:
            _flag(
                result,
                container,
                Grade.CRITICAL,
                "Ephemeral Storage request does not match limit",
                "Having equal requests and limits is recommended to avoid node resource DDOS "
                "during spikes",
            )
    return result


def container_ports_check(pod_template: Mapping[str, Any]) -> TestScore:
    """Check port names are unique and short, and that each port has a number."""
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        seen: set[str] = set()
        for port in container.get("ports") or []:
            port_name = port.get("name") or ""
            problems = []
            if port_name in seen:
                problems.append("Container ports.containerPort named ports must be unique")
            elif port_name:
                seen.add(port_name)
            if len(port_name) > _MAX_PORT_NAME_LENGTH:
                problems.append("Container port.Name length exceeds maximum permitted characters")
            if not port.get("containerPort"):
                problems.append("Container ports.containerPort cannot be empty")
            for problem in problems:
                _flag(result, container, Grade.CRITICAL, _PORT_CHECK, problem)
    return result


def environment_variable_key_duplication(pod_template: Mapping[str, Any]) -> TestScore:
    """Flag environment variable names repeated within a container."""
    result = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        seen: set[str] = set()
        for env in container.get("env") or []:
            env_name = env.get("name") or ""
            if env_name in seen:
                _flag(
                    result,
                    container,
                    Grade.CRITICAL,
                    "Environment Variable Key Duplication",
                    f"Container environment variable key '{env_name}' is duplicated",
                )
            seen.add(env_name)
    return result