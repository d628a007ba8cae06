"""Tests for category scoring and the full scoring pipeline."""

import pytest

from app.rubric import CATEGORY_CAPS, RUBRIC_QUESTIONS
from app.scoring import score_answers, score_category


class TestScoreCategory:
    def test_absent_answers_score_zero(self):
        for category in ("E", "S", "G"):
            score = score_category(category, {})
            assert score.total == 0
            assert score.raw == 0

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            score_category("T", {})

    def test_ladder_first_match(self):
        score = score_category("E", {"e2_energyEfficiency": "led-full-replacement"})
        assert score.breakdown["E2"] == 7

    def test_e3_partial_credit(self):
        assert score_category("E", {"e3_waste": "yes"}).breakdown["E3"] == 3
        assert score_category("E", {"e3_water": "yes"}).breakdown["E3"] == 3
        both = score_category("E", {"e3_waste": "yes", "e3_water": "yes"})
        assert both.breakdown["E3"] == 6

    def test_cap_applied_to_total(self, full_marks_answers):
        score = score_category("E", full_marks_answers)
        assert score.raw == 43
        assert score.total == 35
        assert score.capped

    def test_raw_is_sum_of_breakdown(self, full_marks_answers):
        for category in ("E", "S", "G"):
            score = score_category(category, full_marks_answers)
            assert score.raw == sum(score.breakdown.values())
            assert score.total == min(score.raw, CATEGORY_CAPS[category])

    def test_improvements_below_max(self):
        score = score_category("S", {"s1_training": "basic-training", "s3_supplychain": "yes"})
        assert "S1" in score.improvements
        assert "S3" not in score.improvements


class TestScoreAnswers:
    """End-to-end: raw answers to scores and rating."""

    def test_empty_submission(self):
        result = score_answers({})
        assert result.total == 0
        assert result.level == "D"
        assert len(result.improvements) == len(RUBRIC_QUESTIONS)

    def test_full_marks(self, full_marks_answers):
        result = score_answers(full_marks_answers)
        assert result.scores["E"].total == 35
        assert result.scores["S"].total == 35
        assert result.scores["G"].total == 30
        assert result.total == 100
        assert result.level == "A"
        assert result.improvements == []

    def test_legacy_and_canonical_score_alike(self):
        legacy = score_answers({"e1": "yes"})
        canonical = score_answers({"e1_carbonManagement": "completed-scope1-2"})
        assert legacy.scores["E"].breakdown["E1"] == 12
        assert legacy.to_dict() == canonical.to_dict()

    def test_yes_no_only_environment(self):
        result = score_answers({"e4": "yes", "e5": "yes", "e6": "yes"})
        assert result.scores["E"].total == 15
        for qid in ("E1", "E2", "E3"):
            assert qid in result.improvements

    def test_total_is_sum_of_categories(self, full_marks_answers):
        partial = dict(list(full_marks_answers.items())[::2])
        result = score_answers(partial)
        assert result.total == sum(result.scores[c].total for c in ("E", "S", "G"))
        assert 0 <= result.total <= 100

    def test_more_answers_never_lower_rating(self, full_marks_answers):
        order = "ABCD"
        previous = None
        answers = {}
        for key, value in full_marks_answers.items():
            answers[key] = value
            level = score_answers(answers).level
            if previous is not None:
                assert order.index(level) <= order.index(previous)
            previous = level

    def test_to_dict_shape(self):
        data = score_answers({"g1": "yes", "g2": "yes"}).to_dict()
        assert data["G"] == 20
        assert data["total"] == 20
        assert data["level"] == "D"
        assert data["details"]["G1"] == 10
        assert data["rubricVersion"] == "2.0"
        assert "warning" in data

    def test_capped_categories_visible_in_output(self, full_marks_answers):
        data = score_answers(full_marks_answers).to_dict()
        environment = data["categories"]["E"]
        assert environment == {"total": 35, "raw": 43, "cap": 35, "capped": True}
        assert sum(v for k, v in data["details"].items() if k.startswith("E")) == environment["raw"]
        assert data["categories"]["S"]["capped"] is False
        assert data["categories"]["G"]["raw"] == 41
