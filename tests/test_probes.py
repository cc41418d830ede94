import pytest

from kubegrade.probes import container_probes, pod_is_targeted_by_service
from kubegrade.scorecard import Grade


def _pod(labels, namespace=None):
    meta = {"labels": labels}
    if namespace is not None:
        meta["namespace"] = namespace
    return {"metadata": meta}


def _service(selector, namespace=None):
    service = {"spec": {"selector": selector}}
    if namespace is not None:
        service["metadata"] = {"namespace": namespace}
    return service


@pytest.mark.parametrize(
    "pod, service, expected",
    [
        (_pod({"foo": "bar"}), _service({"foo": "bar"}), True),
        (_pod({"foo": "bar"}), _service({"foo": "baz"}), False),
        (
            _pod({"foo1": "bar1", "foo2": "bar2"}),
            _service({"foo1": "bar1", "foo2": "bar2"}),
            True,
        ),
        (
            _pod({"foo1": "bar1", "foo2": "bar2"}),
            _service({"foo1": "bar1", "foo2": "bar-whatever"}),
            False,
        ),
        (
            _pod({"foo1": "bar1", "foo2": "bar2"}, "foospace"),
            _service({"foo1": "bar1", "foo2": "bar2"}, "foospace"),
            True,
        ),
        (
            _pod({"foo1": "bar1", "foo2": "bar2"}, "foospace"),
            _service({"foo1": "bar1", "foo2": "bar2"}, "someOtherNamespace"),
            False,
        ),
    ],
    ids=[
        "single label match",
        "single label mismatch",
        "multi label match",
        "multi non full match",
        "multi label match same namespace",
        "multi label match different namespace",
    ],
)
def test_pod_is_targeted_by_service(pod, service, expected):
    assert pod_is_targeted_by_service(pod, service) is expected


def _template(*containers, init=()):
    return {
        "metadata": {"labels": {"app": "web"}},
        "spec": {"initContainers": list(init), "containers": list(containers)},
    }


SERVICE = {"metadata": {}, "spec": {"selector": {"app": "web"}}}
HTTP_PROBE = {"httpGet": {"path": "/ready", "port": 8080}}
OTHER_HTTP_PROBE = {"httpGet": {"path": "/live", "port": 8080}}


def test_identical_http_probes_are_critical():
    template = _template(
        {"name": "a", "readinessProbe": HTTP_PROBE, "livenessProbe": HTTP_PROBE}
    )
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.CRITICAL
    assert len(score.comments) == 1
    assert score.comments[0].summary == "Container has the same readiness and liveness probe"


def test_http_ports_compared_by_int_value():
    template = _template(
        {
            "name": "a",
            "readinessProbe": {"httpGet": {"path": "/", "port": "8080"}},
            "livenessProbe": {"httpGet": {"path": "/", "port": 8080}},
        }
    )
    score = container_probes([SERVICE])(template)
    assert score.comments[0].summary == "Container has the same readiness and liveness probe"


def test_identical_tcp_probes_are_critical():
    probe = {"tcpSocket": {"port": 5432}}
    template = _template({"name": "a", "readinessProbe": probe, "livenessProbe": probe})
    score = container_probes([])(template)
    assert score.grade == Grade.CRITICAL
    assert score.comments[0].summary == "Container has the same readiness and liveness probe"


def test_identical_exec_probes_are_critical():
    probe = {"exec": {"command": ["cat", "/tmp/ok"]}}
    template = _template({"name": "a", "readinessProbe": probe, "livenessProbe": probe})
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.CRITICAL


def test_not_targeted_by_service_skips():
    template = _template({"name": "a"})
    score = container_probes([_service({"app": "other"})])(template)
    assert score.grade == Grade.ALL_OK
    assert len(score.comments) == 1
    assert (
        score.comments[0].summary
        == "The pod is not targeted by a service, skipping probe checks."
    )


def test_targeted_in_other_namespace_skips():
    template = _template({"name": "a"})
    score = container_probes([_service({"app": "web"}, "elsewhere")])(template)
    assert score.grade == Grade.ALL_OK
    assert (
        score.comments[0].summary
        == "The pod is not targeted by a service, skipping probe checks."
    )


def test_missing_readiness_is_critical():
    template = _template({"name": "a", "livenessProbe": HTTP_PROBE})
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.CRITICAL
    assert len(score.comments) == 1
    assert score.comments[0].summary == "Container is missing a readinessProbe"


def test_all_missing_reports_readiness():
    score = container_probes([SERVICE])(_template({"name": "a"}))
    assert score.grade == Grade.CRITICAL
    assert score.comments[0].summary == "Container is missing a readinessProbe"


def test_missing_liveness_is_almost_ok():
    template = _template({"name": "a", "readinessProbe": HTTP_PROBE})
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.ALMOST_OK
    assert score.comments[0].summary == "Container is missing a livenessProbe"


def test_different_probes_are_ok():
    template = _template(
        {"name": "a", "readinessProbe": HTTP_PROBE, "livenessProbe": OTHER_HTTP_PROBE}
    )
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_probes_on_different_containers():
    template = _template(
        {"name": "a", "readinessProbe": HTTP_PROBE},
        {"name": "b", "livenessProbe": HTTP_PROBE},
    )
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_probes_on_different_containers_init():
    template = _template(
        {"name": "b", "livenessProbe": HTTP_PROBE},
        init=[{"name": "a", "readinessProbe": HTTP_PROBE}],
    )
    score = container_probes([SERVICE])(template)
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


@pytest.mark.parametrize("kind", ["CronJob", "Job"])
def test_batch_workloads_are_ok(kind):
    score = container_probes([SERVICE])(
        _template({"name": "a"}), {"kind": kind, "apiVersion": "batch/v1"}
    )
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_job_outside_batch_group_is_checked():
    score = container_probes([SERVICE])(
        _template({"name": "a"}), {"kind": "Job", "apiVersion": "example.com/v1"}
    )
    assert score.grade == Grade.CRITICAL