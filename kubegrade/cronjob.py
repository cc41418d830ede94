"""Checks on CronJobs."""

from __future__ import annotations

from typing import Any, Mapping

from kubegrade.scorecard import Grade, TestScore

_VALID_RESTART_POLICIES = ("Never", "OnFailure")
_RESTART_POLICY_HINT = "Valid CronJob RestartPolicy settings are Never or OnFailure"


def _verdict(problem: tuple[str, str] | None) -> TestScore:
    """An OK score, or a critical one explaining ``problem``."""
    if problem is None:
        return TestScore(grade=Grade.ALL_OK)
    verdict = TestScore(grade=Grade.CRITICAL)
    verdict.add_comment("", *problem)
    return verdict


def cronjob_has_deadline(job: Mapping[str, Any]) -> TestScore:
    """Require startingDeadlineSeconds to be set."""
    if (job.get("spec") or {}).get("startingDeadlineSeconds") is not None:
        return _verdict(None)
    return _verdict(
        (
            "The CronJob should have startingDeadlineSeconds configured",
            "This makes sure that jobs are automatically cancelled if they can not be scheduled",
        )
    )


def cronjob_has_restart_policy(job: Mapping[str, Any]) -> TestScore:
    """Require the pod restartPolicy to be Never or OnFailure."""
    job_spec = ((job.get("spec") or {}).get("jobTemplate") or {}).get("spec") or {}
    policy = ((job_spec.get("template") or {}).get("spec") or {}).get("restartPolicy") or ""
    if not policy:
        return _verdict(("The CronJob is missing a valid RestartPolicy", _RESTART_POLICY_HINT))
    if policy not in _VALID_RESTART_POLICIES:
        return _verdict(
            ("The CronJob must have a valid RestartPolicy configured", _RESTART_POLICY_HINT)
        )
    return _verdict(None)