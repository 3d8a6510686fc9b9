import pytest

import database


SCENARIO_HIGH_RISK = {
    "age": "50",
    "gender": "male",
    "weight": "90",
    "height": "170",
    "family-history": "yes",
    "family-relation": "parent",
    "activity-level": "sedentary",
    "diet-habits": "poor",
    "symptoms": ["none"],
    "smoking": "never",
    "stress-level": 3,
    "sleep-quality": "good",
}

SCENARIO_LOW_RISK = {
    "age": "25",
    "gender": "female",
    "weight": "60",
    "height": "165",
    "family-history": "no",
    "activity-level": "active",
    "diet-habits": "excellent",
    "symptoms": ["none"],
    "smoking": "never",
    "stress-level": 2,
    "sleep-quality": "good",
}


@pytest.fixture(autouse=True)
def no_gemini_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_PATH", str(tmp_path / "assessments.db"))
    database.init_db()
    return tmp_path / "assessments.db"


@pytest.fixture
def client(db):
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def high_risk_answers():
    return dict(SCENARIO_HIGH_RISK)


@pytest.fixture
def low_risk_answers():
    return dict(SCENARIO_LOW_RISK)
