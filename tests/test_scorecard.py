import pytest

from kubegrade.scorecard import (
    Check,
    Grade,
    Scorecard,
    ScoredObject,
    TestScore,
)

DEPLOYMENT = {"apiVersion": "apps/v1", "kind": "Deployment"}
IMAGE_TAG = Check(name="Container Image Tag", id="container-image-tag")
OPTIONAL = Check(name="Container Ports Check", id="container-ports-check", optional=True)


def _obj(ignore=True, optional=True):
    card = Scorecard()
    return card.new_object(
        DEPLOYMENT,
        {"name": "web", "namespace": "prod"},
        use_ignore_checks_annotation=ignore,
        use_optional_checks_annotation=optional,
    )


@pytest.mark.parametrize(
    "grade,text",
    [
        (Grade.CRITICAL, "CRITICAL"),
        (Grade.WARNING, "WARNING"),
        (Grade.ALMOST_OK, "OK"),
        (Grade.ALL_OK, "OK"),
    ],
)
def test_grade_str(grade, text):
    assert str(grade) == text


@pytest.mark.parametrize(
    "threshold,expected",
    [
        (Grade.CRITICAL, False),
        (Grade.WARNING, True),
        (Grade.ALMOST_OK, True),
        (Grade.ALL_OK, True),
    ],
)
def test_grade_ordering(threshold, expected):
    obj = _obj()
    obj.add(TestScore(grade=Grade.WARNING), IMAGE_TAG, None)
    assert obj.any_below_or_equal_to_grade(threshold) is expected


def test_new_object_returns_existing():
    card = Scorecard()
    first = card.new_object(DEPLOYMENT, {"name": "web", "namespace": "prod"})
    second = card.new_object(DEPLOYMENT, {"name": "web", "namespace": "prod"})
    assert first is second
    assert len(card) == 1


def test_new_object_distinct_namespaces():
    card = Scorecard()
    a = card.new_object(DEPLOYMENT, {"name": "web", "namespace": "a"})
    b = card.new_object(DEPLOYMENT, {"name": "web", "namespace": "b"})
    assert a is not b
    assert len(card) == 2


def test_new_object_key_format():
    card = Scorecard()
    card.new_object(DEPLOYMENT, {"name": "foo"})
    assert "Deployment/apps/v1//foo" in card


def test_human_friendly_ref():
    card = Scorecard()
    with_ns = card.new_object(DEPLOYMENT, {"name": "web", "namespace": "prod"})
    without_ns = card.new_object(DEPLOYMENT, {"name": "web"})
    assert with_ns.human_friendly_ref() == "web/prod apps/v1/Deployment"
    assert without_ns.human_friendly_ref() == "web apps/v1/Deployment"


def test_add_without_annotations_keeps_score():
    obj = _obj()
    score = TestScore(grade=Grade.CRITICAL)
    obj.add(score, IMAGE_TAG, "location")
    assert obj.checks == [score]
    assert obj.checks[0].check == IMAGE_TAG
    assert obj.checks[0].skipped is False
    assert obj.file_location == "location"


def test_add_ignored_by_annotation():
    obj = _obj()
    score = TestScore(grade=Grade.CRITICAL)
    score.add_comment("c", "summary", "description")
    obj.add(score, IMAGE_TAG, None, {"kube-score/ignore": "container-image-tag"})
    result = obj.checks[0]
    assert result.skipped is True
    assert [c.summary for c in result.comments] == [
        "Skipped because container-image-tag is ignored"
    ]


def test_ignore_annotation_disabled_by_flag():
    obj = _obj(ignore=False)
    obj.add(TestScore(grade=Grade.CRITICAL), IMAGE_TAG, None,
            {"kube-score/ignore": "container-image-tag"})
    assert obj.checks[0].skipped is False
    assert obj.checks[0].grade == Grade.CRITICAL


def test_ignore_list_with_spaces():
    obj = _obj()
    annotations = {"kube-score/ignore": "pod-probes , container-image-tag"}
    assert obj.is_enabled(IMAGE_TAG, annotations) is False


def test_implied_ignore():
    obj = _obj()
    ephemeral = Check(
        name="Container Ephemeral Storage Request and Limit",
        id="container-ephemeral-storage-request-and-limit",
    )
    annotations = {"kube-score/ignore": "container-resources"}
    assert obj.is_enabled(ephemeral, annotations) is False
    assert obj.is_enabled(IMAGE_TAG, annotations) is True


def test_optional_disabled_by_default():
    obj = _obj()
    assert obj.is_enabled(OPTIONAL, {}) is False
    assert obj.is_enabled(OPTIONAL, None) is False


def test_optional_enabled_by_annotation():
    obj = _obj()
    assert obj.is_enabled(OPTIONAL, {"kube-score/enable": "container-ports-check"}) is True


def test_optional_annotation_ignored_when_flag_off():
    obj = _obj(optional=False)
    assert obj.is_enabled(OPTIONAL, {"kube-score/enable": "container-ports-check"}) is False


def test_child_annotation_ignore():
    obj = _obj()
    child = {"kube-score/ignore": "container-image-tag"}
    obj.add(TestScore(grade=Grade.CRITICAL), IMAGE_TAG, None, {}, child)
    assert obj.checks[0].skipped is True


def test_child_enable_overrides_parent_ignore():
    obj = _obj()
    parent = {"kube-score/ignore": "container-ports-check"}
    child = {"kube-score/enable": "container-ports-check"}
    assert obj.is_enabled(OPTIONAL, parent, child) is True


def test_missing_child_annotations_fall_back_to_parent():
    obj = _obj()
    parent = {"kube-score/ignore": "container-image-tag"}
    obj.add(TestScore(grade=Grade.ALL_OK), IMAGE_TAG, None, parent, None)
    assert obj.checks[0].skipped is True


def test_any_below_or_equal_ignores_skipped():
    obj = _obj()
    obj.add(TestScore(grade=Grade.CRITICAL), IMAGE_TAG, None,
            {"kube-score/ignore": "container-image-tag"})
    obj.add(TestScore(grade=Grade.ALL_OK), Check(name="x", id="x"), None)
    assert obj.any_below_or_equal_to_grade(Grade.WARNING) is False
    assert obj.any_below_or_equal_to_grade(Grade.ALL_OK) is True


def test_scorecard_any_below_or_equal():
    card = Scorecard()
    good = card.new_object(DEPLOYMENT, {"name": "a"})
    good.add(TestScore(grade=Grade.ALL_OK), IMAGE_TAG, None)
    assert card.any_below_or_equal_to_grade(Grade.WARNING) is False
    bad = card.new_object(DEPLOYMENT, {"name": "b"})
    bad.add(TestScore(grade=Grade.WARNING), IMAGE_TAG, None)
    assert card.any_below_or_equal_to_grade(Grade.WARNING) is True


def test_add_comment_with_url():
    score = TestScore()
    score.add_comment("p", "s", "d", "u")
    score.add_comment("p2", "s2", "d2")
    assert [(c.path, c.documentation_url) for c in score.comments] == [("p", "u"), ("p2", "")]


def test_scored_object_defaults():
    obj = ScoredObject(type_meta=DEPLOYMENT, object_meta={"name": "web"})
    assert obj.checks == []
    assert obj.any_below_or_equal_to_grade(Grade.ALL_OK) is False