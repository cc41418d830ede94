import pytest

from kubegrade.cronjob import cronjob_has_deadline, cronjob_has_restart_policy
from kubegrade.scorecard import Grade


def _cronjob(deadline=None, restart_policy=None, api_version="batch/v1"):
    pod_spec = {"containers": [{"name": "job", "image": "busybox:1.36"}]}
    if restart_policy is not None:
        pod_spec["restartPolicy"] = restart_policy
    spec = {"schedule": "*/1 * * * *", "jobTemplate": {"spec": {"template": {"spec": pod_spec}}}}
    if deadline is not None:
        spec["startingDeadlineSeconds"] = deadline
    return {"apiVersion": api_version, "kind": "CronJob", "metadata": {"name": "job"}, "spec": spec}


def _summaries(result):
    return [c.summary for c in result.comments]


@pytest.mark.parametrize("api_version", ["batch/v1beta1", "batch/v1"])
@pytest.mark.parametrize(
    "deadline,grade,summaries",
    [
        (100, Grade.ALL_OK, []),
        (0, Grade.ALL_OK, []),
        (None, Grade.CRITICAL, ["The CronJob should have startingDeadlineSeconds configured"]),
    ],
)
def test_deadline(api_version, deadline, grade, summaries):
    result = cronjob_has_deadline(_cronjob(deadline=deadline, api_version=api_version))
    assert result.grade == grade
    assert _summaries(result) == summaries


@pytest.mark.parametrize("api_version", ["batch/v1beta1", "batch/v1"])
@pytest.mark.parametrize(
    "policy,grade,summaries",
    [
        ("Never", Grade.ALL_OK, []),
        ("OnFailure", Grade.ALL_OK, []),
        ("Always", Grade.CRITICAL, ["The CronJob must have a valid RestartPolicy configured"]),
        (None, Grade.CRITICAL, ["The CronJob is missing a valid RestartPolicy"]),
    ],
)
def test_restart_policy(api_version, policy, grade, summaries):
    result = cronjob_has_restart_policy(_cronjob(restart_policy=policy, api_version=api_version))
    assert result.grade == grade
    assert _summaries(result) == summaries


def test_restart_policy_empty_job():
    assert cronjob_has_restart_policy({}).grade == Grade.CRITICAL