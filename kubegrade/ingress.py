"""Checks that Ingresses route to existing Services."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from kubegrade.scorecard import Grade, TestScore


def _path_has_match(
    backend_service: Mapping[str, Any] | None,
    namespace: str,
    services: list[Mapping[str, Any]],
) -> bool:
    if backend_service is None:
        return False
    wanted_name = backend_service.get("name") or ""
    port = backend_service.get("port") or {}
    port_number = port.get("number") or 0
    port_name = port.get("name") or ""

    matched = False
    for service in services:
        meta = service.get("metadata") or {}
        if (meta.get("namespace") or "") != namespace:
            continue
        if (meta.get("name") or "") != wanted_name:
            continue
        for service_port in (service.get("spec") or {}).get("ports") or []:
            if port_number > 0 and service_port.get("port") == port_number:
                matched = True
            elif (service_port.get("name") or "") == port_name:
                matched = True
    return matched


def ingress_targets_service(
    all_services: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that every HTTP path of an Ingress targets a known Service port."""
    services = list(all_services or ())

    def check(ingress: Mapping[str, Any]) -> TestScore:
        score = TestScore()
        namespace = (ingress.get("metadata") or {}).get("namespace") or ""
        all_match = True

        for rule in (ingress.get("spec") or {}).get("rules") or []:
            http = rule.get("http")
            if http is None:
                continue
            for path in http.get("paths") or []:
                backend_service = (path.get("backend") or {}).get("service")
                if _path_has_match(backend_service, namespace, services):
                    continue
                all_match = False
                path_text = path.get("path") or ""
                if backend_service is None:
                    score.add_comment(path_text, "No service match was found", "")
                    continue
                name = backend_service.get("name") or ""
                port = backend_service.get("port") or {}
                number = port.get("number") or 0
                if number > 0:
                    description = f"No service with name {name} and port number {number} was found"
                else:
                    description = (
                        f"No service with name {name} and port named {port.get('name') or ''} was found"
                    )
                score.add_comment(path_text, "No service match was found", description)

        score.grade = Grade.ALL_OK if all_match else Grade.CRITICAL
        return score

    return check