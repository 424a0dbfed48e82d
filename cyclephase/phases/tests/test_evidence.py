"""Tests for symptom, basal temperature, and LH test refinements."""

from __future__ import annotations

import pytest

from cyclephase.phases.estimator import base_scores
from cyclephase.phases.evidence import (
    refine_with_basal_temp,
    refine_with_lh_test,
    refine_with_symptoms,
)
from cyclephase.phases.models import CyclePhase
from cyclephase.phases.tests.conftest import make_symptom

M, F, O, L = (
    CyclePhase.menstrual,
    CyclePhase.follicular,
    CyclePhase.ovulation,
    CyclePhase.luteal,
)


# ---------------------------------------------------------------------------
# Symptoms
# ---------------------------------------------------------------------------


class TestRefineWithSymptoms:
    def test_bleeding_boosts_menstrual_early_in_cycle(self) -> None:
        scores = base_scores(3, 28)
        refined = refine_with_symptoms(scores, [make_symptom("Flow", category="bleeding")], 3)
        assert refined[M] == pytest.approx(0.9)
        assert refined[F] == scores[F]

    def test_bleeding_ignored_after_day_seven(self) -> None:
        scores = base_scores(8, 28)
        refined = refine_with_symptoms(scores, [make_symptom("Flow", category="bleeding")], 8)
        assert refined == scores

    def test_bleeding_with_zero_severity_ignored(self) -> None:
        scores = base_scores(3, 28)
        symptom = make_symptom("Flow", severity=0, category="bleeding")
        assert refine_with_symptoms(scores, [symptom], 3) == scores

    def test_boost_capped_at_one(self) -> None:
        scores = base_scores(1, 28)
        refined = refine_with_symptoms(scores, [make_symptom("Flow", category="bleeding")], 1)
        assert refined[M] == 1.0

    @pytest.mark.parametrize("name", ["Ovulation Pain", "PELVIC PAIN", "Increased discharge"])
    def test_ovulation_symptoms_match_case_insensitively(self, name: str) -> None:
        scores = base_scores(12, 28)
        refined = refine_with_symptoms(scores, [make_symptom(name)], 12)
        assert refined[O] == pytest.approx(0.4)

    def test_ovulation_symptoms_outside_window_ignored(self) -> None:
        for day in (11, 17):
            scores = base_scores(day, 28)
            assert refine_with_symptoms(scores, [make_symptom("pain")], day) == scores

    def test_bloating_boosts_luteal_late_in_cycle(self) -> None:
        scores = base_scores(21, 28)
        refined = refine_with_symptoms(scores, [make_symptom("Bloating")], 21)
        assert refined[L] == pytest.approx(scores[L] + 0.3)

    def test_mood_category_boosts_luteal(self) -> None:
        scores = base_scores(25, 28)
        refined = refine_with_symptoms(scores, [make_symptom("Irritable", category="mood")], 25)
        assert refined[L] == pytest.approx(scores[L] + 0.3)

    def test_pms_symptoms_ignored_before_day_21(self) -> None:
        scores = base_scores(20, 28)
        assert refine_with_symptoms(scores, [make_symptom("Bloating")], 20) == scores

    def test_each_rule_fires_once(self) -> None:
        scores = base_scores(12, 28)
        symptoms = [make_symptom("Pain"), make_symptom("Discharge"), make_symptom("Back pain")]
        refined = refine_with_symptoms(scores, symptoms, 12)
        assert refined[O] == pytest.approx(0.4)

    def test_unrelated_symptoms_change_nothing(self) -> None:
        scores = base_scores(22, 28)
        symptoms = [make_symptom("Headache"), make_symptom("Acne", category="skin")]
        assert refine_with_symptoms(scores, symptoms, 22) == scores

    def test_input_scores_not_mutated(self) -> None:
        scores = base_scores(3, 28)
        before = dict(scores)
        refine_with_symptoms(scores, [make_symptom("Flow", category="bleeding")], 3)
        assert scores == before


# ---------------------------------------------------------------------------
# Basal temperature
# ---------------------------------------------------------------------------


class TestRefineWithBasalTemp:
    def test_elevated_temp_boosts_luteal(self) -> None:
        scores = base_scores(20, 28)
        refined = refine_with_basal_temp(scores, 36.9, 20)
        assert refined[L] == pytest.approx(scores[L] + 0.2)

    def test_elevated_temp_ignored_before_day_15(self) -> None:
        scores = base_scores(10, 28)
        assert refine_with_basal_temp(scores, 36.9, 10) == scores

    def test_baseline_temp_boosts_ovulation_in_window(self) -> None:
        scores = base_scores(13, 28)
        refined = refine_with_basal_temp(scores, 36.55, 13)
        assert refined[O] == pytest.approx(0.75)
        assert refined[L] == scores[L]

    def test_baseline_temp_outside_window_ignored(self) -> None:
        scores = base_scores(8, 28)
        assert refine_with_basal_temp(scores, 36.5, 8) == scores

    def test_moderate_rise_boosts_nothing(self) -> None:
        # 0.25°C above baseline: neither "baseline" nor "elevated"
        scores = base_scores(15, 28)
        assert refine_with_basal_temp(scores, 36.75, 15) == scores

    def test_custom_baseline(self) -> None:
        scores = base_scores(20, 28)
        refined = refine_with_basal_temp(scores, 36.4, 20, baseline_c=36.0)
        assert refined[L] == pytest.approx(scores[L] + 0.2)


# ---------------------------------------------------------------------------
# LH test
# ---------------------------------------------------------------------------


class TestRefineWithLHTest:
    def test_positive_test_boosts_ovulation(self) -> None:
        scores = base_scores(13, 28)
        refined = refine_with_lh_test(scores, True, 13)
        assert refined[O] == pytest.approx(1.0)

    def test_negative_test_changes_nothing(self) -> None:
        scores = base_scores(13, 28)
        assert refine_with_lh_test(scores, False, 13) == scores

    @pytest.mark.parametrize("day", [11, 17, 25])
    def test_positive_test_outside_window_ignored(self, day: int) -> None:
        scores = base_scores(day, 28)
        assert refine_with_lh_test(scores, True, day) == scores

    def test_window_edges_inclusive(self) -> None:
        for day in (12, 16):
            refined = refine_with_lh_test(base_scores(day, 28), True, day)
            assert refined[O] == pytest.approx(0.5)
