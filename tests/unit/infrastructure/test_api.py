"""HTTP tests for the FastAPI app with in-memory services.

The lifespan is not run: services are built directly against a fake
snapshot repository and a fake recommender.
"""

from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import pytest

from ctmap.adapters.persistence.database import get_session
from ctmap.application.ports.recommender_port import RecommenderPort
from ctmap.application.ports.snapshot_repo import SnapshotRepository
from ctmap.config import Settings
from ctmap.domain.errors import ExternalCallError
from ctmap.domain.value_objects.recommendation import Recommendation
from ctmap.infrastructure.api.dependencies import build_services
from ctmap.main import create_app


class FakeSnapshotRepo(SnapshotRepository):
    def __init__(self):
        self.slots: dict[str, dict] = {}

    async def load(self, key):
        return self.slots.get(key)

    async def save(self, key, version, payload):
        self.slots[key] = json.loads(json.dumps(payload))

    async def delete(self, key):
        self.slots.pop(key, None)


class FirstChoiceRecommender(RecommenderPort):
    is_available = True

    async def recommend(self, payload):
        first = payload["advocates"][0]
        return Recommendation(
            advocate_id=first["id"], advocate_name=first["name"],
            confidence=7, reason="First eligible advocate",
        )


class FakeSession:
    async def execute(self, _statement):
        return SimpleNamespace(scalar=lambda: 1)


async def _fake_session():
    yield FakeSession()


async def _make_client(clock):
    repo = FakeSnapshotRepo()
    app = create_app()
    app.state.services = build_services(
        Settings(), repo, FirstChoiceRecommender(), clock=clock,
    )
    app.dependency_overrides[get_session] = _fake_session
    await app.state.services.snapshots.reset_to_seed_data()
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    return client, repo


# ─── Reads ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["counts"]["assignments"] == 11


@pytest.mark.asyncio
async def test_list_and_search(clock):
    client, _ = await _make_client(clock)
    async with client:
        pending = await client.get("/api/assignments", params={"status": "PENDING_ALLOCATION"})
        found = await client.get("/api/assignments/search", params={"q": ""})

    assert pending.status_code == 200
    assert [a["id"] for a in pending.json()["assignments"]] == ["asn_003"]
    assert found.json() == []


@pytest.mark.asyncio
async def test_unknown_assignment_is_404(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.get("/api/assignments/missing")
    assert r.status_code == 404
    assert r.json()["error"] == "NotFoundError"


# ─── Lifecycle ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_claim_persists_snapshot(clock):
    client, repo = await _make_client(clock)
    async with client:
        r = await client.post("/api/assignments/asn_001/claim", json={"user_id": "u1"})
        again = await client.post("/api/assignments/asn_001/claim", json={"user_id": "u2"})

    assert r.status_code == 200
    assert r.json()["status"] == "DRAFT"
    assert again.status_code == 409
    stored = {a["id"]: a for a in repo.slots["ctmap-store"]["assignments"]}
    assert stored["asn_001"]["owner_id"] == "u1"


@pytest.mark.asyncio
async def test_upload_requires_documents(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post(
            "/api/assignments/asn_005/documents", json={"user_id": "u1", "documents": []},
        )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_transfer_request_round_trip(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post(
            "/api/assignments/asn_005/transfer-request", json={"requester_id": "u2"},
        )
        assert r.status_code == 200
        assert r.json()["transfer_request"]["requested_by"] == "u2"

        r = await client.post(
            "/api/assignments/asn_005/transfer-request/resolve",
            json={"actor_id": "u1", "approved": True},
        )
    assert r.status_code == 200
    assert r.json()["owner_id"] == "u2"
    assert r.json()["transfer_request"] is None


# ─── Allocation ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_ranking_and_unknown_weights(clock):
    client, _ = await _make_client(clock)
    async with client:
        ranked = await client.get("/api/allocation/assignments/asn_003/ranking")
        bad = await client.get(
            "/api/allocation/assignments/asn_003/ranking", params={"weights": "fancy"},
        )

    assert [row["advocate_id"] for row in ranked.json()] == ["adv1", "adv2"]
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_auto_allocate(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post("/api/allocation/assignments/asn_003/auto", json={})
        again = await client.post("/api/allocation/assignments/asn_003/auto", json={})
        workload = await client.get("/api/allocation/workload")

    assert r.status_code == 200
    assert r.json()["advocate_id"] == "adv1"
    assert r.json()["score"] == 190
    assert again.status_code == 409
    counts = {row["advocate_id"]: row["workload"] for row in workload.json()}
    assert counts["adv1"] == 2


@pytest.mark.asyncio
async def test_ai_allocate_all(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post("/api/allocation/ai-all", json={})
    body = r.json()
    assert r.status_code == 200
    assert body["total"] == 1
    assert body["successful"] == 1
    assert body["results"][0]["confidence"] == 7


# ─── Forfeit ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_forfeit_and_reallocate(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post(
            "/api/forfeits/asn_006",
            json={
                "advocate_id": "adv1",
                "reason": "Property Access Issues",
                "details": "Society refuses entry without NOC",
            },
        )
        assert r.status_code == 200
        assert r.json()["status"] == "FORFEITED"

        queue = await client.get("/api/forfeits")
        assert [a["id"] for a in queue.json()] == ["asn_006"]

        blocked = await client.post(
            "/api/forfeits/asn_006/reallocate",
            json={"advocate_id": "adv1", "ops_user_id": "ops1"},
        )
        assert blocked.status_code == 409

        auto = await client.post("/api/forfeits/asn_006/auto-reallocate", json={})
    assert auto.json()["success"] is True
    assert auto.json()["advocate_id"] != "adv1"


@pytest.mark.asyncio
async def test_short_forfeit_details_rejected(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post(
            "/api/forfeits/asn_006",
            json={"advocate_id": "adv1", "reason": "Other", "details": "busy"},
        )
    assert r.status_code == 409


# ─── Master data ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_hub_crud_and_referential_check(clock):
    client, _ = await _make_client(clock)
    async with client:
        created = await client.post(
            "/api/hubs",
            json={
                "code": "HYD", "name": "Hyderabad Hub", "email": "hyd@bank.example",
                "state": "Telangana", "district": "Hyderabad",
            },
        )
        assert created.status_code == 201
        hub_id = created.json()["id"]

        in_use = await client.delete("/api/hubs/h1")
        removed = await client.delete(f"/api/hubs/{hub_id}")
        hubs = await client.get("/api/hubs")

    assert in_use.status_code == 409
    assert removed.status_code == 204
    assert hub_id not in [h["id"] for h in hubs.json()]


@pytest.mark.asyncio
async def test_users_filtered_by_role(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.get("/api/users", params={"role": "ADVOCATE"})
    assert sorted(u["id"] for u in r.json()) == ["adv1", "adv10", "adv2", "adv6"]


# ─── Admin ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_bad_import_is_422_and_changes_nothing(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post("/api/admin/import", json={"version": 1, "assignments": []})
        listed = await client.get("/api/assignments")
    assert r.status_code == 422
    assert r.json()["error"] == "SnapshotError"
    assert listed.json()["total"] == 11


@pytest.mark.asyncio
async def test_non_object_record_import_is_422(clock):
    client, _ = await _make_client(clock)
    async with client:
        r = await client.post("/api/admin/import", json={"version": 3, "assignments": [["x"]]})
    assert r.status_code == 422


# ─── Wiring ─────────────────────────────────────────────────────────


class AlwaysFailingRecommender(RecommenderPort):
    is_available = True

    def __init__(self):
        self.calls = 0

    async def recommend(self, payload):
        self.calls += 1
        raise ExternalCallError("upstream 503")


@pytest.mark.asyncio
async def test_ai_attempts_setting_is_total_calls(clock):
    recommender = AlwaysFailingRecommender()
    settings = Settings(AI_MAX_ATTEMPTS=2, AI_BACKOFF_BASE_S=0)
    services = build_services(settings, FakeSnapshotRepo(), recommender, clock=clock)
    await services.snapshots.reset_to_seed_data()

    outcome = await services.ai.allocate_one("asn_003")

    assert not outcome.success
    assert recommender.calls == 2


@pytest.mark.asyncio
async def test_export_import_round_trip(clock):
    client, repo = await _make_client(clock)
    async with client:
        exported = (await client.get("/api/admin/export")).json()
        await client.post("/api/admin/clear")
        assert (await client.get("/api/assignments")).json()["total"] == 0
        assert repo.slots == {}

        r = await client.post("/api/admin/import", json=exported)
        listed = await client.get("/api/assignments")
    assert r.status_code == 200
    assert listed.json()["total"] == 11
