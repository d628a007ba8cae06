"""HTTP tests for the scoring API, dashboard and advisor endpoints."""

import pytest

from app import db
from app.models import Assessment


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert data["rubric_version"] == "2.0"
        assert "assessments" in data["tables"]

    def test_unknown_route_is_json(self, client):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}


class TestCalculateScore:
    def test_yes_no_environment(self, client):
        resp = client.post("/api/calculate-score", json={"e4": "yes", "e5": "yes", "e6": "yes"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["E"] == 15
        assert data["total"] == 15
        assert data["level"] == "D"
        assert "E1" in data["improvements"]

    def test_full_marks(self, client, full_marks_answers):
        data = client.post("/api/calculate-score", json=full_marks_answers).get_json()
        assert data["total"] == 100
        assert data["level"] == "A"
        assert data["levelName"] == "領先級 (A)"

    def test_non_object_body(self, client):
        resp = client.post("/api/calculate-score", json=["e1", "yes"])
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_empty_body_scores_zero(self, client):
        data = client.post("/api/calculate-score").get_json()
        assert data["total"] == 0


class TestCalculators:
    def test_improvement_suggestions(self, client):
        data = client.post("/api/improvement-suggestions", json={"improvements": ["E1", "ZZ"]}).get_json()
        assert list(data) == ["E1"]
        assert data["E1"]["actions"]

    def test_carbon_calculator(self, client):
        data = client.post("/api/carbon-calculator", json={"electricity": 1000}).get_json()
        assert data["scope2"] == 509.0
        assert data["total"] == 509.0
        assert data["unit"] == "kg CO2e"
        assert data["breakdown"]["electricity"] == 509.0

    def test_classify_activity(self, client):
        data = client.post("/api/activities/classify", json={
            "category": "一般經濟活動",
            "condition1": True,
            "condition2": True,
            "condition3": False,
            "transitionPlan": "是",
        }).get_json()
        assert data["rating"] == "T"
        assert data["label"] == "轉型中"


class TestActivityAssessment:
    def test_percentage_rating_and_activities(self, client):
        esg = {key: "yes" for key in (
            "e1", "e2", "e3", "e4", "e5", "e6", "s1", "s2", "s3",
            "s4", "s5", "g1", "g2", "g3", "g4", "g5", "g6", "g7",
        )}
        resp = client.post("/api/activity-assessment", json={
            "esgAnswers": esg,
            "activities": [
                {"activityCode": "A1", "category": "排除適用之經濟活動"},
                {"activityCode": "A2", "category": "前瞻經濟活動",
                 "condition1": True, "condition2": True, "condition3": True},
            ],
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "success"
        assert data["esgScores"]["rating"] == "A"
        assert data["esgScores"]["percentage"] == 100.0
        assert [a["rating"] for a in data["activities"]] == ["X", "Y"]
        assert data["summary"]["inScope"] == 1

    def test_activities_must_be_list(self, client):
        resp = client.post("/api/activity-assessment", json={"activities": {"category": "x"}})
        assert resp.status_code == 400


class TestAssessments:
    def _post(self, client, date, answers, tax_id="12345678", **extra):
        body = {"companyName": "測試公司", "companyTaxId": tax_id, "date": date, "answers": answers}
        body.update(extra)
        return client.post("/api/assessments", json=body)

    def test_date_required(self, client):
        resp = client.post("/api/assessments", json={"answers": {}})
        assert resp.status_code == 400

    def test_create_and_fetch(self, client):
        resp = self._post(
            client, "2024-03-01", {"e1": "yes"},
            environmentalData={"electricity": 1000, "diesel": 10},
            activities=[{"activityCode": "C1", "condition1": True, "transitionPlan": "否"}],
        )
        assert resp.status_code == 201
        created = resp.get_json()
        assert created["scores"]["E"] == 12
        assert created["result"]["total"] == 12
        assert created["environmentalData"]["scope2Emissions"] == 509.0
        assert created["environmentalData"]["electricityUsage"] == 1000
        assert created["activities"][0]["rating"] == "N"

        fetched = client.get(f"/api/assessments/{created['id']}").get_json()
        assert fetched["companyName"] == "測試公司"

    def test_missing_assessment(self, client):
        assert client.get("/api/assessments/999").status_code == 404

    def test_list_filters_by_company(self, client):
        self._post(client, "2024-01-01", {}, tax_id="111")
        self._post(client, "2024-02-01", {}, tax_id="222")
        data = client.get("/api/assessments?companyTaxId=111").get_json()
        assert [a["companyTaxId"] for a in data["assessments"]] == ["111"]


class TestDashboard:
    def test_progress_unlocks_once(self, client):
        client.post("/api/assessments", json={
            "companyTaxId": "555", "date": "2024-01-01", "answers": {"g1": "yes", "g2": "yes"},
        })
        first = client.get("/dashboard/progress?companyTaxId=555").get_json()
        assert "governance_excellence" in [a["id"] for a in first["newAchievements"]]
        assert first["stats"]["total_assessments"] == 1

        second = client.get("/dashboard/progress?companyTaxId=555").get_json()
        assert second["newAchievements"] == []
        assert "governance_excellence" in [a["id"] for a in second["achievements"]]

    def test_rescore_fixes_stale_rows(self, app, client):
        resp = client.post("/api/assessments", json={
            "companyTaxId": "777", "date": "2024-01-01", "answers": {"e1": "yes"},
        })
        assessment_id = resp.get_json()["id"]
        with app.app_context():
            row = db.session.get(Assessment, assessment_id)
            row.total = 99
            row.level = "A"
            db.session.commit()

        data = client.post("/dashboard/rescore?companyTaxId=777").get_json()
        assert data == {"ok": True, "checked": 1, "changed": 1}
        with app.app_context():
            row = db.session.get(Assessment, assessment_id)
            assert (row.total, row.level) == (12, "D")


class TestAdvisor:
    def test_ask_without_key(self, client, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        resp = client.post("/chat/ask", json={"question": "如何提升E分數？"})
        assert resp.status_code == 400
        assert resp.get_json()["answer"] is None

    def test_ask_requires_question(self, client, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        resp = client.post("/chat/ask", json={"question": "  "})
        assert resp.status_code == 400

    def test_feedback_uses_scored_context(self, client, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        calls = []

        def fake_call(system, messages):
            calls.append(system)
            return "建議先完成碳盤查。"

        monkeypatch.setattr("app.chat.routes._call_model", fake_call)
        resp = client.post("/chat/feedback", json={"answers": {"e1": "yes"}})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["answer"] == "建議先完成碳盤查。"
        assert data["score"]["E"] == 12
        assert "E=12/35" in calls[0]

    def test_model_error_is_500(self, client, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")

        def failing_call(system, messages):
            raise RuntimeError("upstream timeout")

        monkeypatch.setattr("app.chat.routes._call_model", failing_call)
        resp = client.post("/chat/ask", json={"question": "hello"})
        assert resp.status_code == 500
        assert "upstream timeout" in resp.get_json()["error"]


class TestGriAssessment:
    def test_weighted_score(self, client):
        responses = {c: [{"value": "yes", "label": "a"}] * 3 for c in ("E", "S", "G")}
        resp = client.post("/api/gri-assessment", json={"responses": responses, "timestamp": "2025-01-01T00:00:00Z"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "success"
        assert data["timestamp"] == "2025-01-01T00:00:00Z"
        assert data["score"]["total"] == pytest.approx(9.0)
        assert data["score"]["level"] == "A (領先級)"

    def test_malformed_responses(self, client):
        resp = client.post("/api/gri-assessment", json={"responses": ["E"]})
        assert resp.status_code == 400


class TestActivityAssessmentKeyNaming:
    def test_current_keys_counted(self, client):
        resp = client.post("/api/activity-assessment", json={
            "esgAnswers": {"e1_carbonManagement": "completed-scope1-2", "e4_environmentalPenalty": "yes"},
        })
        assert resp.get_json()["esgScores"]["yesCount"] == 2


class TestAdvisorHistory:
    def test_non_list_history_ignored(self, client, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        sent = []

        def fake_call(system, messages):
            sent.append(messages)
            return "ok"

        monkeypatch.setattr("app.chat.routes._call_model", fake_call)
        resp = client.post("/chat/ask", json={"question": "hi", "history": {"a": 1}})
        assert resp.status_code == 200
        assert sent[0] == [{"role": "user", "content": "hi"}]

    def test_feedback_context_names_categories(self, client, monkeypatch, full_marks_answers):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        prompts = []
        monkeypatch.setattr(
            "app.chat.routes._call_model",
            lambda system, messages: prompts.append(system) or "ok",
        )
        client.post("/chat/feedback", json={"answers": full_marks_answers})
        assert "環境保護與氣候行動: 35/35 (raw 43, capped)" in prompts[0]
