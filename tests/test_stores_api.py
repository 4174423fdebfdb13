"""Tests for /stores endpoints."""

import pytest


@pytest.fixture
async def counter(client):
    """A registered counter store at count 3 with three history entries."""
    response = await client.post("/stores", json={"name": "counter", "initial_state": {"count": 0}})
    assert response.status_code == 201
    for n in range(1, 4):
        await client.patch("/stores/counter/state", json={"count": n})
    return "counter"


class TestStores:
    """Tests for creating and listing stores."""

    @pytest.mark.asyncio
    async def test_create_store(self, client):
        """Should create a store with default settings."""
        response = await client.post(
            "/stores",
            json={"name": "todos", "initial_state": {"todos": []}},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "todos"
        assert data["timeline_enabled"] is True
        assert data["branching_enabled"] is True
        assert data["position"] == 0
        assert data["active_branch_id"] == "main"

    @pytest.mark.asyncio
    async def test_create_with_toggles(self, client):
        """Booleans switch the timeline and branching on or off."""
        response = await client.post(
            "/stores",
            json={"name": "plain", "timeline": False, "branching": False},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["timeline_enabled"] is False
        assert data["branching_enabled"] is False

    @pytest.mark.asyncio
    async def test_duplicate_name(self, client, counter):
        """Names are unique within the app registry."""
        response = await client.post("/stores", json={"name": counter})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_timeline_config(self, client):
        """max_history must be positive."""
        response = await client.post(
            "/stores",
            json={"name": "bad", "timeline": {"max_history": 0}},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_and_delete(self, client, counter):
        response = await client.get("/stores")
        assert [s["name"] for s in response.json()] == [counter]

        response = await client.delete(f"/stores/{counter}")
        assert response.status_code == 204
        response = await client.get(f"/stores/{counter}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_store(self, client):
        response = await client.get("/stores/missing/state")
        assert response.status_code == 404


class TestState:
    """Tests for reading and writing data."""

    @pytest.mark.asyncio
    async def test_merge_and_replace(self, client, counter):
        response = await client.patch(f"/stores/{counter}/state", json={"label": "x"})
        assert response.json()["state"] == {"count": 3, "label": "x"}

        response = await client.put(f"/stores/{counter}/state", json={"count": 0})
        assert response.json()["state"] == {"count": 0}

    @pytest.mark.asyncio
    async def test_non_object_body(self, client, counter):
        response = await client.patch(f"/stores/{counter}/state", json=[1, 2])
        assert response.status_code == 422


class TestTimeline:
    """Tests for timeline navigation."""

    @pytest.mark.asyncio
    async def test_read_timeline(self, client, counter):
        data = (await client.get(f"/stores/{counter}/timeline")).json()
        assert data["position"] == 3
        assert data["length"] == 3
        assert data["can_back"] is True
        assert data["can_forward"] is False

    @pytest.mark.asyncio
    async def test_back_forward_go_reset(self, client, counter):
        response = await client.post(f"/stores/{counter}/timeline/back", params={"steps": 2})
        assert response.json()["position"] == 1
        state = (await client.get(f"/stores/{counter}/state")).json()["state"]
        assert state == {"count": 1}

        response = await client.post(f"/stores/{counter}/timeline/forward")
        assert response.json()["position"] == 2

        response = await client.post(f"/stores/{counter}/timeline/go", json={"position": 99})
        assert response.json()["position"] == 3

        response = await client.post(f"/stores/{counter}/timeline/reset")
        assert response.json()["position"] == 0
        state = (await client.get(f"/stores/{counter}/state")).json()["state"]
        assert state == {"count": 0}

    @pytest.mark.asyncio
    async def test_negative_steps_rejected(self, client, counter):
        response = await client.post(f"/stores/{counter}/timeline/back", params={"steps": -1})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_history(self, client, counter):
        response = await client.get(f"/stores/{counter}/timeline/history")
        assert response.json() == [{"count": n} for n in range(4)]

    @pytest.mark.asyncio
    async def test_manual_archive(self, client):
        await client.post(
            "/stores",
            json={"name": "draft", "initial_state": {"text": ""}, "timeline": {"auto_archive": False}},
        )
        await client.patch("/stores/draft/state", json={"text": "a"})
        await client.patch("/stores/draft/state", json={"text": "ab"})

        data = (await client.get("/stores/draft/timeline")).json()
        assert data["can_archive"] is True
        assert data["length"] == 0

        data = (await client.post("/stores/draft/timeline/archive")).json()
        assert data["length"] == 1
        assert data["can_archive"] is False


class TestBranches:
    """Tests for branch endpoints."""

    @pytest.mark.asyncio
    async def test_fork_switch_diff(self, client, counter):
        await client.post(f"/stores/{counter}/timeline/go", json={"position": 2})

        response = await client.post(f"/stores/{counter}/branches", json={"name": "exp"})
        assert response.status_code == 201
        branch = response.json()
        assert branch["name"] == "exp"
        assert branch["parent_branch_id"] == "main"
        assert branch["fork_point"] == 2
        assert branch["current_state"] == {"count": 2}

        response = await client.post(f"/stores/{counter}/branches/{branch['id']}/switch")
        assert response.json()["state"] == {"count": 2}
        await client.patch(f"/stores/{counter}/state", json={"count": 4})

        active = (await client.get(f"/stores/{counter}/branches/active")).json()
        assert active["id"] == branch["id"]

        response = await client.get(
            f"/stores/{counter}/branches/diff",
            params={"a": "main", "b": branch["id"]},
        )
        diff = response.json()
        assert diff["added"] == []
        assert diff["removed"] == []
        assert diff["changed"] == [{"path": ["count"], "from": 2, "to": 4}]

        response = await client.post(f"/stores/{counter}/branches/main/switch")
        assert response.json()["state"] == {"count": 2}

    @pytest.mark.asyncio
    async def test_list_and_rename(self, client, counter):
        branch = (await client.post(f"/stores/{counter}/branches", json={})).json()
        assert branch["name"].startswith("branch-")

        response = await client.patch(
            f"/stores/{counter}/branches/{branch['id']}",
            json={"name": "renamed"},
        )
        assert response.json()["name"] == "renamed"

        names = [b["name"] for b in (await client.get(f"/stores/{counter}/branches")).json()]
        assert names == ["main", "renamed"]

    @pytest.mark.asyncio
    async def test_delete_rules(self, client, counter):
        response = await client.delete(f"/stores/{counter}/branches/main")
        assert response.status_code == 409

        branch = (await client.post(f"/stores/{counter}/branches", json={})).json()
        await client.post(f"/stores/{counter}/branches/{branch['id']}/switch")
        response = await client.delete(f"/stores/{counter}/branches/{branch['id']}")
        assert response.status_code == 409

        await client.post(f"/stores/{counter}/branches/main/switch")
        response = await client.delete(f"/stores/{counter}/branches/{branch['id']}")
        assert response.status_code == 204

        response = await client.delete(f"/stores/{counter}/branches/{branch['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_switch_unknown(self, client, counter):
        response = await client.post(f"/stores/{counter}/branches/nope/switch")
        assert response.status_code == 404


class TestActions:
    """Tests for the action log endpoints."""

    @pytest.mark.asyncio
    async def test_read_and_clear(self, client, counter):
        log = (await client.get(f"/stores/{counter}/actions")).json()
        assert [e["action_name"] for e in log] == ["set(count)"] * 3
        assert log[0]["patches"] == [{"op": "replace", "path": "/count", "value": 1}]

        response = await client.delete(f"/stores/{counter}/actions")
        assert response.status_code == 204
        assert (await client.get(f"/stores/{counter}/actions")).json() == []
