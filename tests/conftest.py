"""Shared fixtures: an app bound to an in-memory SQLite database."""

import pytest

from app import create_app, db
from config import TestingConfig


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def full_marks_answers():
    """Best answer for every canonical key."""
    return {
        "e1_carbonManagement": "completed-scope1-2",
        "e2_energyEfficiency": "updated-equipment-past2y",
        "e3_waste": "yes",
        "e3_water": "yes",
        "e4_environmentalPenalty": "yes",
        "e5_renewableEnergy": "yes",
        "e6_circularEconomy": "yes",
        "s1_training": "yes-15hours",
        "s2_welfare": "exceeds-law",
        "s3_supplychain": "yes",
        "s4_community": "yes",
        "s5_esgInvestment": "yes",
        "g1_sustainability": "executive-with-team",
        "g2_compliance": "no-major-violations",
        "g3_integrity": "yes",
        "g4_profitability": "yes",
        "g5_boardMeeting": "yes",
        "g6_shareholderCommunication": "yes",
        "g7_sustainabilityReport": "yes",
    }
