import logging

from flask import Blueprint, request, jsonify

from app import db
from app.activities import EconomicActivity, classify, compliance_summary
from app.carbon import compute_footprint, parse_quantity
from app.gri import score_gri
from app.models import Assessment, ActivityRecord
from app.normalizer import MalformedInputError
from app.rating import count_yes, rate_by_percentage
from app.rubric import get_improvement_suggestions
from app.scoring import score_answers

logger = logging.getLogger(__name__)

assessment_bp = Blueprint("assessment", __name__, url_prefix="/api")


def _json_object():
    """Request body as a dict; anything else is malformed input."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedInputError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _classify_all(items):
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedInputError("activities must be a list")
    classified = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedInputError("Each activity must be a JSON object")
        activity = EconomicActivity.from_dict(item)
        classified.append((activity, classify(activity)))
    return classified


@assessment_bp.route("/calculate-score", methods=["POST"])
def calculate_score():
    data = _json_object()
    result = score_answers(data)
    logger.info(
        f"Scored submission: E={result.scores['E'].total} S={result.scores['S'].total} "
        f"G={result.scores['G'].total} total={result.total} level={result.level}"
    )
    return jsonify(result.to_dict())


@assessment_bp.route("/improvement-suggestions", methods=["POST"])
def improvement_suggestions():
    data = _json_object()
    improvements = data.get("improvements") or []
    if not isinstance(improvements, list):
        raise MalformedInputError("improvements must be a list of question ids")
    return jsonify(get_improvement_suggestions(improvements))


@assessment_bp.route("/carbon-calculator", methods=["POST"])
def carbon_calculator():
    data = _json_object()
    footprint = compute_footprint(data)
    return jsonify(footprint.to_dict())


@assessment_bp.route("/gri-assessment", methods=["POST"])
def gri_assessment():
    data = _json_object()
    timestamp = data.get("timestamp")
    score = score_gri(data.get("responses"))
    logger.info(f"GRI assessment submitted at {timestamp}: {score.total} ({score.level})")
    return jsonify({
        "status": "success",
        "message": "感謝您完成 GRI 評估！",
        "score": score.to_dict(),
        "timestamp": timestamp,
    })


@assessment_bp.route("/activities/classify", methods=["POST"])
def classify_activity():
    data = _json_object()
    rating = classify(EconomicActivity.from_dict(data))
    return jsonify(rating.to_dict())


@assessment_bp.route("/activity-assessment", methods=["POST"])
def activity_assessment():
    """Activity-submission flow: percentage-of-yes rating plus per-activity Y/T/N/X."""
    data = _json_object()
    esg_answers = data.get("esgAnswers") or {}
    if not isinstance(esg_answers, dict):
        raise MalformedInputError("esgAnswers must be a JSON object")

    yes_count, total_questions = count_yes(esg_answers)
    rating = rate_by_percentage(yes_count, total_questions)
    classified = _classify_all(data.get("activities"))

    activities = []
    for activity, activity_rating in classified:
        activities.append({
            "activityCode": activity.activity_code,
            "activityName": activity.activity_name,
            "category": activity.category,
            **activity_rating.to_dict(),
        })

    return jsonify({
        "status": "success",
        "esgScores": rating.to_dict(),
        "activities": activities,
        "summary": compliance_summary([r for _, r in classified]),
    })


@assessment_bp.route("/assessments", methods=["POST"])
def create_assessment():
    """Score and store an assessment for progress tracking."""
    data = _json_object()
    answers = data.get("answers") or {}
    if not isinstance(answers, dict):
        raise MalformedInputError("answers must be a JSON object")
    date = str(data.get("date") or "").strip()
    if not date:
        return jsonify({"error": "date is required"}), 400

    result = score_answers(answers)
    classified = _classify_all(data.get("activities"))

    env = data.get("environmentalData") or {}
    if not isinstance(env, dict):
        raise MalformedInputError("environmentalData must be a JSON object")
    footprint = compute_footprint(env)

    assessment = Assessment(
        company_name=str(data.get("companyName") or "").strip(),
        company_tax_id=str(data.get("companyTaxId") or "default").strip(),
        assessment_date=date,
        answers=answers,
        scope1_emissions=footprint.scope1,
        scope2_emissions=footprint.scope2,
        electricity_usage=parse_quantity(env.get("electricity")),
    )
    assessment.apply_result(result)
    db.session.add(assessment)
    db.session.flush()

    for activity, rating in classified:
        record = ActivityRecord.from_activity(activity, rating)
        record.assessment_id = assessment.id
        db.session.add(record)

    db.session.commit()
    logger.info(f"Stored assessment {assessment.id} for {assessment.company_tax_id}: {result.total} ({result.level})")

    payload = assessment.to_dict()
    payload["result"] = result.to_dict()
    return jsonify(payload), 201


@assessment_bp.route("/assessments", methods=["GET"])
def list_assessments():
    query = Assessment.query
    tax_id = request.args.get("companyTaxId", "").strip()
    if tax_id:
        query = query.filter_by(company_tax_id=tax_id)
    assessments = query.order_by(Assessment.assessment_date, Assessment.id).all()
    return jsonify({"assessments": [a.to_dict() for a in assessments]})


@assessment_bp.route("/assessments/<int:assessment_id>", methods=["GET"])
def get_assessment(assessment_id):
    assessment = db.session.get(Assessment, assessment_id)
    if not assessment:
        return jsonify({"error": "Assessment not found"}), 404
    payload = assessment.to_dict()
    payload["result"] = score_answers(assessment.answers or {}).to_dict()
    return jsonify(payload)
