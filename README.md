# kubegrade

kubegrade grades Kubernetes object definitions against a set of reliability
and security checks. Each check looks at one object, sometimes together with
the other objects it relates to. It returns a `TestScore` that holds a `Grade`
and a list of `TestScoreComment`s that explain what was found.

## Installation

```
pip install .
```

The package has no runtime dependencies. To run the test suite:

```
pip install ".[test]"
pytest
```

## Grades

`kubegrade.scorecard.Grade` is an `IntEnum` with four members. Its `str()` is
the label shown below:

| Grade       | Value | `str()`  |
|-------------|-------|----------|
| `CRITICAL`  | 1     | CRITICAL |
| `WARNING`   | 5     | WARNING  |
| `ALMOST_OK` | 7     | OK       |
| `ALL_OK`    | 10    | OK       |

## Checks

Objects are plain dictionaries, in the shape a manifest has once it is loaded
(`apiVersion`, `kind`, `metadata`, `spec`). Pod checks take a pod template,
which is a mapping with `metadata` and `spec`.

- `kubegrade.container`: `container_resources(require_cpu_limit,
  require_memory_limit)` (a factory), `container_cpu_requests_equal_limits`,
  `container_memory_requests_equal_limits`,
  `container_resource_requests_equal_limits`, `container_image_tag`,
  `container_image_pull_policy`, `container_storage_ephemeral_request_and_limit`,
  `container_storage_ephemeral_request_equals_limit`, `container_ports_check`,
  `environment_variable_key_duplication`, and the helper `container_tag(image)`.
- `kubegrade.security`: `container_security_context_read_only_root_filesystem`,
  `container_security_context_privileged`,
  `container_security_context_user_group_id` (user and group IDs must be at
  least 10000, and the pod's security context supplies any missing values),
  `pod_seccomp_profile`.
- `kubegrade.probes`: `container_probes(all_services)` returns a check that
  takes a pod template and, optionally, the owner's type metadata. Jobs and
  CronJobs in the `batch` group always pass. Probes that are identical are
  critical. A readinessProbe is only required when a Service targets the pod.
  `pod_is_targeted_by_service(pod, service)` is also available.
- `kubegrade.topology`: `pod_topology_spread_constraints`.
- `kubegrade.networkpolicy`: `pod_has_network_policy(all_netpols)` and
  `network_policy_targets_pod(pods, podspecers)`.
- `kubegrade.service`: `service_targets_pod(pods, podspecers)` and
  `service_type`, which warns about NodePort services.
- `kubegrade.ingress`: `ingress_targets_service(all_services)`.
- `kubegrade.disruptionbudget`: `stateful_set_has(budgets)` and
  `deployment_has(budgets)`. Both skip workloads that have fewer than 2
  replicas. There are also `has_policy(pdb)` and `has_matching(budgets,
  namespace, labels)`.
- `kubegrade.hpa`: `hpa_has_target(all_targetable_objects)`.
- `kubegrade.cronjob`: `cronjob_has_deadline` and `cronjob_has_restart_policy`.
- `kubegrade.meta`: `validate_label_values`.
- `kubegrade.stable`: `meta_stable_available(Semver(major, minor))` warns about
  deprecated apiVersions whose replacement already exists in that Kubernetes
  version.

The factories take the related objects and return the check function:

```python
from kubegrade.container import container_image_tag
from kubegrade.service import service_type

pod = {
    "metadata": {"name": "web"},
    "spec": {"containers": [{"name": "web", "image": "nginx:latest"}]},
}
score = container_image_tag(pod)
print(score.grade)                 # CRITICAL
print(score.comments[0].summary)   # Image with latest tag

svc = {"metadata": {"name": "web"}, "spec": {"type": "NodePort"}}
print(service_type(svc).grade)     # WARNING
```

## Label selectors

`kubegrade.labels.selector_matches(selector, labels)` evaluates a
`LabelSelector` that has `matchLabels` and `matchExpressions`, with the
operators `In`, `NotIn`, `Exists` and `DoesNotExist`. A missing selector
selects nothing, and an empty one selects everything. A malformed selector
raises `InvalidSelectorError`. `selector_matches_labels` matches a plain
`key: value` selector and treats an invalid selector as matching nothing.

## Quantities

`kubegrade.quantity.parse_quantity` parses resource quantities such as `256Mi`,
`0.25Gi`, `1000m` or `1e3` into exact `Quantity` values. It raises `ValueError`
on bad input. Two quantities are equal when they stand for the same amount,
so `256Mi` equals `0.25Gi`.

## Scorecards and annotations

`kubegrade.scorecard.Scorecard` is a dict of `ScoredObject`s keyed by
`kind/apiVersion/namespace/name`. `Scorecard.new_object` returns the existing
entry when the key is already present. `ScoredObject.add(score, check,
file_location, annotations[, template_annotations])` records a score for a
`Check`. When the annotations turn the check off, it marks the score as
skipped:

- `kube-score/ignore` (honoured when `use_ignore_checks_annotation` is set)
  is a comma-separated list of check IDs to skip. Ignoring
  `container-resources` also skips
  `container-ephemeral-storage-request-and-limit`.
- `kube-score/enable` (honoured when `use_optional_checks_annotation` is set)
  turns on checks marked `optional`. Optional checks are off unless they are
  enabled this way.

Pod template annotations are consulted before the owning object's annotations.
`any_below_or_equal_to_grade(threshold)` on a scorecard or object reports
whether any score that was not skipped is at or below the threshold.

## What this package does not do

kubegrade is a library of check functions and a scorecard to collect their
results. It has no command line. It does not read or parse YAML manifest
files. It has no registry that runs every check over a set of objects, and it
does not format results for output. Callers load the objects, call the checks
they want, and record the results with `ScoredObject.add` themselves.