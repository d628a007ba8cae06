import logging

from flask import Blueprint, request, jsonify

from app import db
from app.models import Assessment, UnlockedAchievement
from app.progress import ACHIEVEMENTS, build_trend, evaluate_achievements, rescore

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


def _history(tax_id):
    return (
        Assessment.query.filter_by(company_tax_id=tax_id)
        .order_by(Assessment.assessment_date, Assessment.id)
        .all()
    )


@dashboard_bp.route("/progress")
def progress():
    """Trend data and achievements for one company."""
    tax_id = request.args.get("companyTaxId", "default").strip() or "default"
    assessments = _history(tax_id)
    history = [a.to_dict() for a in assessments]

    unlocked_rows = UnlockedAchievement.query.filter_by(company_tax_id=tax_id).all()
    new = evaluate_achievements(history, [u.achievement_id for u in unlocked_rows])
    for achievement in new:
        db.session.add(UnlockedAchievement(
            company_tax_id=tax_id,
            achievement_id=achievement["id"],
            unlocked_date=achievement["unlockedDate"] or "",
            assessment_id=achievement["unlockedByAssessment"],
        ))
    if new:
        db.session.commit()
        logger.info(f"Unlocked {len(new)} achievement(s) for {tax_id}")

    definitions = {d["id"]: d for d in ACHIEVEMENTS}
    unlocked = [
        {
            "id": u.achievement_id,
            "name": definitions[u.achievement_id]["name"],
            "icon": definitions[u.achievement_id]["icon"],
            "unlockedDate": u.unlocked_date,
        }
        for u in UnlockedAchievement.query.filter_by(company_tax_id=tax_id)
        .order_by(UnlockedAchievement.id).all()
        if u.achievement_id in definitions
    ]

    stats = {
        "total_assessments": len(history),
        "latest_rating": history[-1]["rating"] if history else None,
        "achievements_unlocked": len(unlocked),
        "achievements_total": len(ACHIEVEMENTS),
    }

    return jsonify({
        "companyTaxId": tax_id,
        "companyName": assessments[-1].company_name if assessments else "",
        "stats": stats,
        "trend": build_trend(history),
        "achievements": unlocked,
        "newAchievements": new,
    })


@dashboard_bp.route("/rescore", methods=["POST"])
def rescore_history():
    """Recompute stored scores from raw answers with the current rubric."""
    tax_id = request.args.get("companyTaxId", "").strip()
    assessments = _history(tax_id) if tax_id else Assessment.query.order_by(Assessment.id).all()

    updated, changed = rescore([a.to_dict() for a in assessments])
    for assessment, entry in zip(assessments, updated):
        if assessment.answers:
            assessment.apply_scores(entry["scores"], entry["rating"])
    db.session.commit()

    return jsonify({"ok": True, "checked": len(assessments), "changed": changed})
