"""Tests for the Y/T/N/X economic activity classifier."""

import logging

import pytest

from app.activities import (
    CATEGORY_FORWARD_LOOKING,
    CATEGORY_GENERAL,
    CATEGORY_OUT_OF_SCOPE,
    ActivityRating,
    EconomicActivity,
    classify,
    compliance_summary,
    normalize_plan,
)


def _activity(category=CATEGORY_GENERAL, c1=True, c2=True, c3=True, plan="not-applicable"):
    return EconomicActivity(
        category=category, condition1=c1, condition2=c2, condition3=c3, transition_plan=plan
    )


class TestClassify:
    def test_out_of_scope_takes_precedence(self):
        assert classify(_activity(category=CATEGORY_OUT_OF_SCOPE)).rating == "X"
        assert classify(_activity(category=CATEGORY_OUT_OF_SCOPE, c1=False, plan="no")).rating == "X"

    @pytest.mark.parametrize("category", [CATEGORY_GENERAL, CATEGORY_FORWARD_LOOKING])
    def test_all_conditions_met(self, category):
        assert classify(_activity(category=category, plan="no")).rating == "Y"

    def test_transitioning(self):
        activity = EconomicActivity.from_dict({
            "category": "一般經濟活動",
            "condition1": True,
            "condition2": True,
            "condition3": False,
            "transitionPlan": "是",
        })
        rating = classify(activity)
        assert rating.rating == "T"
        assert "轉型計畫" in rating.definition

    def test_non_compliant(self):
        assert classify(_activity(c2=False, plan="否")).rating == "N"

    def test_not_applicable_plan_is_non_compliant(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.activities"):
            rating = classify(_activity(c1=False, plan="not-applicable"))
        assert rating.rating == "N"
        assert "transition plan" in caplog.text

    def test_rating_labels(self):
        assert ActivityRating("Y").label == "符合"
        assert ActivityRating("X").to_dict()["label"] == "不適用"


class TestFromDict:
    def test_string_conditions(self):
        activity = EconomicActivity.from_dict({
            "condition1": "是", "condition2": "yes", "condition3": "否",
        })
        assert activity.condition1 and activity.condition2
        assert not activity.condition3
        assert activity.category == CATEGORY_GENERAL

    def test_bad_revenue_share(self):
        assert EconomicActivity.from_dict({"revenueShare": "lots"}).revenue_share is None
        assert EconomicActivity.from_dict({"revenueShare": "12.5"}).revenue_share == 12.5

    @pytest.mark.parametrize("raw,plan", [
        ("是", "yes"), ("有", "yes"), ("否", "no"), ("不適用", "not-applicable"),
        (True, "yes"), (None, "not-applicable"), ("maybe", "not-applicable"),
    ])
    def test_normalize_plan(self, raw, plan):
        assert normalize_plan(raw) == plan


class TestComplianceSummary:
    def test_counts_and_share(self):
        ratings = [ActivityRating(tag) for tag in ("Y", "T", "N", "X")]
        summary = compliance_summary(ratings)
        assert summary["counts"] == {"Y": 1, "T": 1, "N": 1, "X": 1}
        assert summary["inScope"] == 3
        assert summary["compliantPercentage"] == 33.3

    def test_empty(self):
        assert compliance_summary([])["compliantPercentage"] == 0.0
