import os
import json
import logging

from flask import Blueprint, current_app, request, jsonify

from app.models import Assessment
from app.rubric import CATEGORIES, CATEGORY_CAPS, CATEGORY_LABELS, RUBRIC_VERSION, get_question_by_id
from app.scoring import score_answers

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__, url_prefix="/chat")

ESG_ADVISOR_PROMPT = f"""You are the ESG Advisor of a bank's sustainable-finance coaching platform for small and medium enterprises (SMEs) in Taiwan. You explain the bank's simplified ESG self-assessment (TESES, rubric version {RUBRIC_VERSION}) and give practical improvement advice.

## THE RUBRIC
- E (Environment, max {CATEGORY_CAPS['E']}): carbon inventory, energy efficiency, waste and water management, no environmental penalties, renewable energy investment, circular economy
- S (Social, max {CATEGORY_CAPS['S']}): employee training, welfare beyond legal minimum, supply-chain commitments, community engagement, ESG/green financial products
- G (Governance, max {CATEGORY_CAPS['G']}): sustainability lead, regulatory compliance record, integrity policy, profitability, board meetings, shareholder communication, sustainability report

## RATINGS AND FINANCING
- A (>= 80): sustainability-linked loans (SLL), green financing, 0.15% ~ 0.2% rate discount
- B (>= 60): general sustainable credit, 0.05% ~ 0.1% rate discount
- C (>= 30): no discount, must sign a 12-month transition letter of intent and reach B
- D (< 30): base rate +0.05%, must submit a risk improvement plan

## ECONOMIC ACTIVITY RATINGS (永續經濟活動認定參考指引)
- Y 符合: meets all three conditions (substantial contribution, no significant environmental harm, no significant social harm)
- T 轉型中: fails a condition but has a concrete transition plan
- N 不符合: fails a condition without a transition plan
- X 不適用: out of scope of the guideline

## CARBON INVENTORY
- Scope 1: natural gas 2.02 kg/m³, gasoline 2.31 kg/L, diesel 2.68 kg/L, LPG 1.51 kg/L
- Scope 2: electricity 0.509 kg CO2e/kWh (Taipower grid average)

## RESPONSE GUIDELINES
- Answer in the same language as the question (Traditional Chinese or English)
- Prioritise the lowest-cost actions that move the company to the next rating tier
- Reference specific question ids (E1 ... G7) and their point values
- Mention government subsidies or the bank's coaching tools where relevant
- Be concise, concrete and encouraging; never invent scores"""


def _score_context(result, answers=None):
    """Context block describing a scored submission."""
    data = result.to_dict()
    lines = [
        "\n\nCURRENT ASSESSMENT CONTEXT:",
        f"Rubric version: {RUBRIC_VERSION}",
        f"Scores: E={data['E']}/{CATEGORY_CAPS['E']}, S={data['S']}/{CATEGORY_CAPS['S']}, "
        f"G={data['G']}/{CATEGORY_CAPS['G']}, total={data['total']}/100",
        f"Rating: {data['levelName']}",
    ]
    for c in CATEGORIES:
        category = data["categories"][c]
        line = f"- {c} {CATEGORY_LABELS[c]}: {category['total']}/{category['cap']}"
        if category["capped"]:
            line += f" (raw {category['raw']}, capped)"
        lines.append(line)
    if data.get("warning"):
        lines.append(f"Warning: {data['warning']}")

    if result.improvements:
        lines.append("\nIMPROVEMENT OPPORTUNITIES (below maximum):")
        for qid in result.improvements:
            q = get_question_by_id(qid)
            points = data["details"].get(qid, 0)
            lines.append(f"- {qid} {q['title']}: {points}/{q['max_points']}")

    if answers:
        lines.append(f"\nRaw answers: {json.dumps(answers, ensure_ascii=False)}")
    return "\n".join(lines)


def _get_assessment_context(assessment_id):
    """Build context string from a stored assessment."""
    if not assessment_id:
        return ""

    from app import db
    assessment = db.session.get(Assessment, assessment_id)
    if not assessment:
        return ""

    header = (
        f"\n\nCompany: {assessment.company_name or '(unnamed)'}"
        f"\nAssessment date: {assessment.assessment_date}"
        f"\nScope 1: {assessment.scope1_emissions or 0} kg CO2e, Scope 2: {assessment.scope2_emissions or 0} kg CO2e"
    )
    return header + _score_context(score_answers(assessment.answers or {}))


def _call_model(system, messages):
    """Send one Messages API request and return the text of the reply."""
    import anthropic

    client = anthropic.Anthropic(
        api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        timeout=current_app.config.get("ADVISOR_TIMEOUT", 90.0),
    )
    response = client.messages.create(
        model=current_app.config.get("ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929"),
        max_tokens=current_app.config.get("ADVISOR_MAX_TOKENS", 2000),
        system=system,
        messages=messages,
    )
    return response.content[0].text


def _missing_key_response():
    return jsonify({
        "error": "ANTHROPIC_API_KEY not configured.",
        "answer": None,
    }), 400


@chat_bp.route("/ask", methods=["POST"])
def ask():
    """Answer a free-form question, optionally about a stored assessment."""
    if not os.environ.get("ANTHROPIC_API_KEY", ""):
        return _missing_key_response()

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not str(data.get("question") or "").strip():
        return jsonify({"error": "No question provided.", "answer": None}), 400

    question = str(data["question"]).strip()
    assessment_id = data.get("assessment_id")
    history = data.get("history")
    if not isinstance(history, list):
        history = []

    system = ESG_ADVISOR_PROMPT
    if assessment_id:
        system += _get_assessment_context(assessment_id)

    messages = []
    for msg in history[-10:]:  # last 10 messages
        if isinstance(msg, dict) and msg.get("role") in ("user", "assistant") and msg.get("content"):
            messages.append({"role": msg["role"], "content": msg["content"]})
    messages.append({"role": "user", "content": question})

    try:
        answer = _call_model(system, messages)
        return jsonify({"answer": answer, "error": None})
    except Exception as e:
        logger.error(f"Chat API error: {e}")
        return jsonify({
            "error": f"AI service error: {str(e)}",
            "answer": None,
        }), 500


@chat_bp.route("/feedback", methods=["POST"])
def feedback():
    """Advisory prose for a raw answer submission. The text is returned as-is."""
    if not os.environ.get("ANTHROPIC_API_KEY", ""):
        return _missing_key_response()

    data = request.get_json(silent=True)
    answers = data.get("answers") if isinstance(data, dict) else None
    if not isinstance(answers, dict):
        return jsonify({"error": "answers must be a JSON object.", "answer": None}), 400

    result = score_answers(answers)
    system = ESG_ADVISOR_PROMPT + _score_context(result, answers)
    prompt = (
        "根據以上評分結果，請以繁體中文撰寫一份簡潔的改善建議報告："
        "先總結目前等級與優勢，再依優先順序列出3至5項最具成本效益的改善行動，"
        "並說明每項行動可提升的分數與達到下一個等級所需的分數。"
    )

    try:
        answer = _call_model(system, [{"role": "user", "content": prompt}])
        return jsonify({"answer": answer, "score": result.to_dict(), "error": None})
    except Exception as e:
        logger.error(f"Feedback generation error: {e}")
        return jsonify({
            "error": f"AI service error: {str(e)}",
            "answer": None,
        }), 500
