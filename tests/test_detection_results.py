"""
Tests for the per-detector results aggregator and accuracy certificates.
"""

import pytest

from orchestrator.certificates.bernoulli import (
    ClopperPearsonCertificate,
    HoeffdingCertificate,
    make_certificate,
)
from orchestrator.risk import DetectionRecord, DetectionResults


def test_empty_record_has_zero_accuracy():
    rec = DetectionRecord("Ground Sensors")
    assert rec.trials == 0
    assert rec.accuracy == 0.0
    assert DetectionResults().accuracy("missing") == 0.0


def test_record_tracks_counts_and_outcome_sequence():
    results = DetectionResults()
    for outcome in [True, False, True, True]:
        results.record("GEO", outcome)

    assert results.trials("GEO") == 4
    assert results.successes("GEO") == 3
    assert results.accuracy("GEO") == 0.75
    assert results.get("GEO").outcomes == [1.0, 0.0, 1.0, 1.0]


def test_summary_is_derived_from_counts():
    results = DetectionResults()
    results.register("A")
    results.record("B", False)
    results.record("B", True)

    summary = results.summary()
    assert list(summary) == ["A", "B"]
    assert summary["A"] == (0, 0, 0.0, [])
    assert summary["B"].trials == 2
    assert summary["B"].successes == 1
    assert summary["B"].accuracy == 0.5

    # the returned sequence is a copy
    summary["B"].outcomes.append(1.0)
    assert results.get("B").outcomes == [0.0, 1.0]


def test_successes_never_exceed_trials():
    results = DetectionResults()
    for i in range(100):
        results.record("X", i % 3 != 0)
    rec = results.get("X")
    assert 0 <= rec.successes <= rec.trials == 100


def test_best_and_improvement_over_baseline():
    results = DetectionResults()
    for outcome in [True, False, False, False]:
        results.record("Ground Sensors", outcome)
    for outcome in [True, True, False, False]:
        results.record("LEO", outcome)
    for outcome in [True, True, True, False]:
        results.record("GEO", outcome)

    assert results.best().detector == "GEO"
    deltas = results.improvement_over("Ground Sensors")
    assert set(deltas) == {"LEO", "GEO"}
    assert deltas["LEO"] == pytest.approx(25.0)
    assert deltas["GEO"] == pytest.approx(50.0)


def test_best_is_none_without_successes():
    results = DetectionResults()
    results.record("A", False)
    assert results.best() is None


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------

def test_clopper_pearson_reference_value():
    cert = ClopperPearsonCertificate(alpha=0.05)
    assert cert.lower_confidence_bound(18, 20) == pytest.approx(0.7166, abs=5e-3)
    assert cert.lower_confidence_bound(0, 20) == 0.0
    assert cert.lower_confidence_bound(0, 0) == 0.0
    assert cert.lower_confidence_bound(20, 20) == pytest.approx(0.05 ** (1 / 20))


def test_hoeffding_reference_value():
    cert = HoeffdingCertificate(alpha=0.05)
    assert cert.lower_confidence_bound(18, 20) == pytest.approx(0.626, abs=1e-3)
    assert cert.upper_confidence_bound(18, 20) == 1.0
    assert cert.lower_confidence_bound(0, 0) == 0.0


@pytest.mark.parametrize("kind", ["clopper_pearson", "hoeffding"])
@pytest.mark.parametrize("successes, trials", [(1, 10), (5, 10), (9, 10), (120, 250), (0, 7), (7, 7)])
def test_bounds_bracket_empirical_accuracy(kind, successes, trials):
    cert = make_certificate(kind, 0.05)
    phat = successes / trials
    assert 0.0 <= cert.lower_confidence_bound(successes, trials) <= phat
    assert phat <= cert.upper_confidence_bound(successes, trials) <= 1.0


def test_outperforms_requires_separated_bounds():
    cert = ClopperPearsonCertificate(alpha=0.05)
    assert cert.outperforms((95, 100), (50, 100))
    assert not cert.outperforms((52, 100), (50, 100))


def test_certificate_validation():
    with pytest.raises(ValueError):
        make_certificate("bayes", 0.05)
    with pytest.raises(ValueError):
        ClopperPearsonCertificate(alpha=1.5)
