import copy

from app.models import ScoreClassification, Subject
from app.schemas.filter import ThresholdConfig
from app.services.threshold_filter import classify_record, classify_score, evaluate, filter_options

RECORDS = [
    {"id": "a", "serial": 1, "english_marks": "60", "inst": "BUET", "dept": "CSE"},
    {"id": "b", "serial": 2, "english_marks": "59", "inst": "BUET", "dept": "EEE"},
    {"id": "c", "serial": 3, "english_marks": "", "inst": "DU", "dept": "CSE"},
    {"id": "d", "serial": 4, "english_marks": "abc", "inst": " BUET ", "dept": "CSE"},
]


def test_default_thresholds():
    thresholds = ThresholdConfig.default()
    assert thresholds.threshold_for(Subject.ENGLISH) == 59
    assert all(thresholds.threshold_for(s) == 49 for s in Subject if s != Subject.ENGLISH)


def test_classify_score():
    assert classify_score("60", 59) == ScoreClassification.ALLOW
    assert classify_score(59, 59) == ScoreClassification.NOT_ALLOW
    assert classify_score("59.01", 59) == ScoreClassification.ALLOW
    assert classify_score("", 59) == ScoreClassification.NO_EXAM
    assert classify_score(None, 59) == ScoreClassification.NO_EXAM
    assert classify_score("abc", 59) == ScoreClassification.INVALID


def test_english_filter_passes_only_strictly_greater():
    result = evaluate(RECORDS, {}, [Subject.ENGLISH], ThresholdConfig.default())
    assert [r["id"] for r in result] == ["a"]


def test_no_filters_returns_everything_in_order():
    result = evaluate(RECORDS, {"inst": []}, [], ThresholdConfig.default())
    assert [r["id"] for r in result] == ["a", "b", "c", "d"]


def test_categorical_filters_are_anded_and_trimmed():
    result = evaluate(RECORDS, {"inst": ["BUET"], "dept": ["CSE"]}, [], ThresholdConfig.default())
    assert [r["id"] for r in result] == ["a", "d"]


def test_subjects_are_ored():
    records = [
        {"id": "x", "english_marks": "50", "physics_marks": "70"},
        {"id": "y", "english_marks": "50", "physics_marks": "40"},
    ]
    result = evaluate(records, {}, [Subject.ENGLISH, Subject.PHYSICS], ThresholdConfig.default())
    assert [r["id"] for r in result] == ["x"]


def test_threshold_overrides():
    thresholds = ThresholdConfig.default().with_overrides({Subject.ENGLISH: 50})
    result = evaluate(RECORDS, {}, [Subject.ENGLISH], thresholds)
    assert [r["id"] for r in result] == ["a", "b"]


def test_evaluate_does_not_mutate_records():
    before = copy.deepcopy(RECORDS)
    evaluate(RECORDS, {"inst": ["BUET"]}, [Subject.ENGLISH], ThresholdConfig.default())
    assert RECORDS == before


def test_classify_record():
    record = {"english_marks": "60", "english_set": "B", "physics_marks": "49", "bangla_marks": "n/a"}
    results, has_allow = classify_record(record, ThresholdConfig.default())
    by_subject = {r.score.subject: r for r in results}
    assert has_allow
    assert by_subject[Subject.ENGLISH].classification == ScoreClassification.ALLOW
    assert by_subject[Subject.ENGLISH].score.set_label == "B"
    assert by_subject[Subject.PHYSICS].classification == ScoreClassification.NOT_ALLOW
    assert by_subject[Subject.BANGLA].classification == ScoreClassification.INVALID
    assert by_subject[Subject.ICT].classification == ScoreClassification.NO_EXAM


def test_classify_record_without_allow():
    _, has_allow = classify_record({"english_marks": "59"}, ThresholdConfig.default())
    assert not has_allow


def test_filter_options():
    options = filter_options(RECORDS, fields=("inst", "dept"))
    assert options == {"inst": ["BUET", "DU"], "dept": ["CSE", "EEE"]}


def test_evaluate_is_repeatable():
    args = (RECORDS, {"inst": ["BUET"]}, [Subject.ENGLISH], ThresholdConfig.default())
    assert evaluate(*args) == evaluate(*args)
