"""
API tests for the roadmap and agent routers.

Services are injected through dependency overrides; the app lifespan
(database and LLM setup) is not run.
"""

import pytest
from fastapi.testclient import TestClient

from src.agent.decision_engine import DecisionEngine
from src.agent.orchestrator import AgentOrchestrator
from src.api.dependencies import get_orchestrator, get_roadmap_service
from src.api.main import app
from src.roadmap.roadmap_service import RoadmapService


@pytest.fixture
def service(generator, roadmap_repo, lesson_repo, quiz_repo, flashcard_repo):
    return RoadmapService(generator, roadmap_repo, lesson_repo, quiz_repo, flashcard_repo)


@pytest.fixture
def orchestrator(generator, learner_repo, memory_repo, lesson_repo, quiz_repo):
    return AgentOrchestrator(DecisionEngine(), generator, learner_repo, memory_repo, lesson_repo, quiz_repo)


@pytest.fixture
def client(service, orchestrator):
    app.dependency_overrides[get_roadmap_service] = lambda: service
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_roadmap(client, days=3, owner_id="user-1"):
    response = client.post(
        "/roadmaps",
        json={"owner_id": owner_id, "topic": "Terraform", "total_days": days, "daily_minutes": 60},
    )
    assert response.status_code == 201
    return response.json()["roadmap_id"]


def day_ids(client, roadmap_id):
    details = client.get(f"/roadmaps/{roadmap_id}").json()
    return [day["id"] for day in details["days"]]


class TestRoadmapEndpoints:
    def test_create_and_get(self, client):
        roadmap_id = create_roadmap(client)

        response = client.get(f"/roadmaps/{roadmap_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["roadmap"]["topic"] == "Terraform"
        assert data["roadmap"]["status"] == "active"
        assert [day["status"] for day in data["days"]] == ["available", "locked", "locked"]

    @pytest.mark.parametrize(
        "payload",
        [
            {"topic": "Go", "total_days": 10, "daily_minutes": 60},
            {"topic": "Terraform", "total_days": 2, "daily_minutes": 60},
            {"topic": "Terraform", "total_days": 91, "daily_minutes": 60},
            {"topic": "Terraform", "total_days": 10, "daily_minutes": 20},
        ],
    )
    def test_create_validation(self, client, payload, generator):
        response = client.post("/roadmaps", json=payload)

        assert response.status_code == 422
        assert generator.calls == []

    def test_create_generation_failure(self, client, generator):
        generator.fail_kinds.add("roadmap")

        response = client.post("/roadmaps", json={"topic": "Terraform", "total_days": 5, "daily_minutes": 60})

        assert response.status_code == 502

    def test_list_with_progress(self, client):
        roadmap_id = create_roadmap(client, days=4)
        first_day = day_ids(client, roadmap_id)[0]
        client.post(f"/roadmaps/{roadmap_id}/days/{first_day}/complete")

        response = client.get("/roadmaps", params={"owner_id": "user-1"})

        assert response.status_code == 200
        [summary] = response.json()
        assert summary["completed_days"] == 1
        assert summary["progress"] == 25
        assert summary["current_day"] == 2

    def test_unknown_roadmap(self, client):
        assert client.get("/roadmaps/nope").status_code == 404

    def test_delete(self, client):
        roadmap_id = create_roadmap(client)

        assert client.delete(f"/roadmaps/{roadmap_id}").status_code == 204
        assert client.get(f"/roadmaps/{roadmap_id}").status_code == 404
        assert client.delete(f"/roadmaps/{roadmap_id}").status_code == 404


class TestDayEndpoints:
    def test_generate_and_fetch_day(self, client):
        roadmap_id = create_roadmap(client)
        day_id = day_ids(client, roadmap_id)[0]

        generated = client.post(f"/days/{day_id}/lesson", json={"learner_id": "learner-1"})
        assert generated.status_code == 200

        response = client.get(f"/days/{day_id}", params={"learner_id": "learner-1"})

        assert response.status_code == 200
        bundle = response.json()
        assert bundle["lesson"]["id"] == generated.json()["id"]
        assert bundle["quiz"]["total_questions"] == 3
        assert len(bundle["flashcards"]) == 5
        assert bundle["roadmap"]["id"] == roadmap_id

    def test_generate_unknown_day(self, client):
        response = client.post("/days/nope/lesson", json={"learner_id": "learner-1"})

        assert response.status_code == 404

    def test_get_unknown_day(self, client):
        assert client.get("/days/nope").status_code == 404

    def test_complete_flow(self, client):
        roadmap_id = create_roadmap(client, days=3)
        ids = day_ids(client, roadmap_id)

        for number, day_id in enumerate(ids, start=1):
            response = client.post(f"/roadmaps/{roadmap_id}/days/{day_id}/complete")
            assert response.status_code == 200
            assert response.json()["completed_day"] == number

        assert response.json() == {"completed_day": 3, "unlocked_day": None, "roadmap_completed": True}
        assert client.get(f"/roadmaps/{roadmap_id}").json()["roadmap"]["status"] == "completed"

    def test_complete_locked_day_conflict(self, client):
        roadmap_id = create_roadmap(client, days=3)
        locked = day_ids(client, roadmap_id)[2]

        response = client.post(f"/roadmaps/{roadmap_id}/days/{locked}/complete")

        assert response.status_code == 409


class TestAgentEndpoint:
    def test_tick(self, client, learner_repo, memory_repo, make_state):
        from src.core.types import LearnerMemory

        learner_repo.states["learner-1"] = make_state(mastery=10)
        memory_repo.memories["learner-1"] = LearnerMemory(learner_id="learner-1")

        response = client.post("/agent/tick")

        assert response.status_code == 200
        data = response.json()
        assert data["processed"] == 1
        assert data["decisions"] == [{"type": "GENERATE_LESSON", "topic": "Python basics", "difficulty": 1}]
        assert data["errors"] == []


def test_services_unavailable_without_llm():
    app.dependency_overrides.clear()
    client = TestClient(app)

    assert client.get("/roadmaps").status_code == 503
    assert client.post("/agent/tick").status_code == 503


def test_root():
    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "eduagent"
