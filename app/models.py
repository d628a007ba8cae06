from datetime import datetime, timezone

from app import db
from app.rubric import RUBRIC_VERSION


class Assessment(db.Model):
    __tablename__ = "assessments"

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(256), nullable=False, default="")
    company_tax_id = db.Column(db.String(20), nullable=False, default="default", index=True)
    assessment_date = db.Column(db.String(20), nullable=False)
    answers = db.Column(db.JSON, nullable=False, default=dict)
    e_score = db.Column(db.Integer, default=0)
    s_score = db.Column(db.Integer, default=0)
    g_score = db.Column(db.Integer, default=0)
    total = db.Column(db.Integer, default=0)
    level = db.Column(db.String(1), default="D")
    rubric_version = db.Column(db.String(10), default=RUBRIC_VERSION)
    # Environmental data in kg CO2e / kWh
    scope1_emissions = db.Column(db.Float, default=0)
    scope2_emissions = db.Column(db.Float, default=0)
    electricity_usage = db.Column(db.Float, default=0)
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    activities = db.relationship(
        "ActivityRecord", backref="assessment", lazy="dynamic", cascade="all, delete-orphan"
    )

    def apply_result(self, result):
        """Copy an AssessmentResult onto the stored score columns."""
        self.apply_scores(
            {
                "E": result.scores["E"].total,
                "S": result.scores["S"].total,
                "G": result.scores["G"].total,
                "total": result.total,
            },
            result.level,
        )

    def apply_scores(self, scores, level):
        self.e_score = scores["E"]
        self.s_score = scores["S"]
        self.g_score = scores["G"]
        self.total = scores["total"]
        self.level = level
        self.rubric_version = RUBRIC_VERSION

    def to_dict(self):
        return {
            "id": self.id,
            "companyName": self.company_name,
            "companyTaxId": self.company_tax_id,
            "date": self.assessment_date,
            "scores": {
                "total": self.total or 0,
                "E": self.e_score or 0,
                "S": self.s_score or 0,
                "G": self.g_score or 0,
            },
            "rating": self.level,
            "rubricVersion": self.rubric_version,
            "environmentalData": {
                "scope1Emissions": self.scope1_emissions or 0,
                "scope2Emissions": self.scope2_emissions or 0,
                "electricityUsage": self.electricity_usage or 0,
            },
            "answers": self.answers or {},
            "activities": [a.to_dict() for a in self.activities.order_by(ActivityRecord.id).all()],
        }


class ActivityRecord(db.Model):
    __tablename__ = "activity_records"

    id = db.Column(db.Integer, primary_key=True)
    assessment_id = db.Column(
        db.Integer, db.ForeignKey("assessments.id"), nullable=False
    )
    activity_code = db.Column(db.String(50), default="")
    activity_name = db.Column(db.String(256), default="")
    activity_type = db.Column(db.String(20), default="operating")
    category = db.Column(db.String(50), nullable=False)
    condition1 = db.Column(db.Boolean, default=False)
    condition2 = db.Column(db.Boolean, default=False)
    condition3 = db.Column(db.Boolean, default=False)
    transition_plan = db.Column(db.String(20), default="not-applicable")
    revenue_share = db.Column(db.Float, nullable=True)
    rating = db.Column(db.String(1), nullable=False)
    # Rating: Y=compliant, T=transitioning, N=non-compliant, X=out of scope

    @classmethod
    def from_activity(cls, activity, rating):
        return cls(
            activity_code=activity.activity_code,
            activity_name=activity.activity_name,
            activity_type=activity.activity_type,
            category=activity.category,
            condition1=activity.condition1,
            condition2=activity.condition2,
            condition3=activity.condition3,
            transition_plan=activity.transition_plan,
            revenue_share=activity.revenue_share,
            rating=rating.rating,
        )

    def to_dict(self):
        return {
            "activityCode": self.activity_code,
            "activityName": self.activity_name,
            "type": self.activity_type,
            "category": self.category,
            "condition1": self.condition1,
            "condition2": self.condition2,
            "condition3": self.condition3,
            "transitionPlan": self.transition_plan,
            "revenueShare": self.revenue_share,
            "rating": self.rating,
        }


class UnlockedAchievement(db.Model):
    __tablename__ = "unlocked_achievements"

    id = db.Column(db.Integer, primary_key=True)
    company_tax_id = db.Column(db.String(20), nullable=False, index=True)
    achievement_id = db.Column(db.String(50), nullable=False)
    unlocked_date = db.Column(db.String(20), default="")
    assessment_id = db.Column(db.Integer, db.ForeignKey("assessments.id"), nullable=True)
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        db.UniqueConstraint("company_tax_id", "achievement_id", name="uq_company_achievement"),
    )
