"""HTTP-level tests (httpx AsyncClient against the ASGI app)."""

from datetime import datetime

import pytest


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "ok"
        assert "x-request-id" in resp.headers
        assert "x-response-ms" in resp.headers

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        resp = await client.get("/health", headers={"x-request-id": "req-123"})
        assert resp.headers["x-request-id"] == "req-123"


class TestLogsApi:
    @pytest.mark.asyncio
    async def test_create_and_get(self, client):
        resp = await client.post(
            "/logs",
            json={
                "deviceUuid": "dev-1",
                "dataType": "record",
                "key": "temp",
                "value": {"celsius": 21.5},
                "sessionUuid": "S1",
                "projectId": 1,
                "timestamp": 1704067200000,
            },
            headers={"x-forwarded-for": "10.0.0.7"},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["value"] == '{"celsius":21.5}'
        assert body["clientIp"] == "10.0.0.7"
        assert body["clientTimestamp"] == 1704067200000
        assert body["createdAt"].endswith("Z")

        fetched = await client.get(f"/logs/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["key"] == "temp"

    @pytest.mark.asyncio
    async def test_string_values_stored_verbatim(self, client):
        resp = await client.post("/logs", json={"deviceUuid": "dev-1", "dataType": "warning", "key": "k", "value": "raw"})
        assert resp.json()["value"] == "raw"

    @pytest.mark.asyncio
    async def test_create_rejects_bad_body(self, client):
        resp = await client.post("/logs", json={"deviceUuid": "dev-1", "dataType": "info", "key": "k"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["meta"]["request_id"]

    @pytest.mark.asyncio
    async def test_pagination(self, client, seed):
        ids = await seed(*[{"minutes": i} for i in range(25)])

        page1 = (await client.get("/logs", params={"page": 1, "pageSize": 10})).json()
        page3 = (await client.get("/logs", params={"page": 3, "pageSize": 10})).json()

        assert [log["id"] for log in page1["logs"]] == ids[:10]
        assert [log["id"] for log in page3["logs"]] == ids[20:]
        assert page1["pagination"] == {"page": 1, "pageSize": 10, "total": 25, "totalPages": 3}

    @pytest.mark.asyncio
    async def test_page_size_clamped(self, client, seed):
        await seed(*[{"minutes": i} for i in range(3)])
        body = (await client.get("/logs", params={"pageSize": 100000})).json()
        assert body["pagination"]["pageSize"] == 100

    @pytest.mark.asyncio
    async def test_list_filters(self, client, seed):
        await seed({"device_uuid": "a", "data_type": "error"}, {"device_uuid": "b", "data_type": "error", "minutes": 1})
        body = (await client.get("/logs", params={"deviceUuid": "a", "dataType": "error"})).json()
        assert [log["deviceUuid"] for log in body["logs"]] == ["a"]
        assert body["filtersApplied"] == {"device_uuid": "a", "data_type": "error"}

    @pytest.mark.asyncio
    async def test_invalid_data_type(self, client):
        resp = await client.get("/logs", params={"dataType": "verbose"})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "invalid dataType"

    @pytest.mark.asyncio
    async def test_create_rejects_unserializable_value(self, client):
        resp = await client.post(
            "/logs", json={"deviceUuid": "dev-1", "dataType": "record", "key": "k", "value": {"n": 2**70}}
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        assert (await client.get("/logs")).json()["pagination"]["total"] == 0

    @pytest.mark.asyncio
    async def test_create_rejects_out_of_range_integers(self, client):
        base = {"deviceUuid": "dev-1", "dataType": "record", "key": "k"}
        for extra in ({"timestamp": 2**70}, {"timestamp": -1}, {"projectId": 2**63}):
            resp = await client.post("/logs", json={**base, **extra})
            assert resp.status_code == 400, extra
            assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_list_rejects_oversized_project_id(self, client):
        resp = await client.get("/logs", params={"projectId": "99999999999999999999999"})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "invalid projectId"

    @pytest.mark.asyncio
    async def test_oversized_log_id(self, client):
        resp = await client.get("/logs/99999999999999999999999")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_missing_log(self, client):
        resp = await client.get("/logs/999")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_delete_by_id(self, client, seed):
        (log_id,) = await seed(key="temp")
        resp = await client.delete(f"/logs/{log_id}")
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert (await client.delete(f"/logs/{log_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_by_filter(self, client, seed):
        await seed({"device_uuid": "a"}, {"device_uuid": "a", "minutes": 1}, {"device_uuid": "b", "minutes": 2})
        resp = await client.delete("/logs", params={"deviceUuid": "a"})
        assert resp.json() == {"success": True, "deleted": 2}

    @pytest.mark.asyncio
    async def test_delete_by_filter_requires_criteria(self, client, seed):
        await seed(key="temp")
        resp = await client.delete("/logs")
        assert resp.status_code == 400
        assert (await client.get("/logs")).json()["pagination"]["total"] == 1


class TestReportsApi:
    @pytest.mark.asyncio
    async def test_device_report(self, client, seed):
        await seed(
            {"device_uuid": "X", "data_type": "record"},
            {"device_uuid": "X", "data_type": "record", "minutes": 1},
            {"device_uuid": "X", "data_type": "warning", "minutes": 2},
            {"device_uuid": "X", "data_type": "error", "minutes": 3},
        )
        body = (await client.get("/reports/device/X")).json()
        assert body["deviceUuid"] == "X"
        assert body["totalLogs"] == 4
        assert body["typeCounts"] == {"record": 2, "warning": 1, "error": 1}

    @pytest.mark.asyncio
    async def test_time_range_start_after_end(self, client):
        resp = await client.get(
            "/reports/time-range",
            params={"startTime": "2024-01-02T00:00:00Z", "endTime": "2024-01-01T00:00:00Z"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "start after end"

    @pytest.mark.asyncio
    async def test_time_range_requires_bounds(self, client):
        resp = await client.get("/reports/time-range", params={"startTime": "2024-01-01T00:00:00Z"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_error_report(self, client, seed):
        await seed({"device_uuid": "X", "data_type": "error", "key": "stall"})
        body = (await client.get("/reports/errors")).json()
        assert body["totalErrors"] == 1
        assert body["errors"][0]["key"] == "stall"
        assert body["groups"][0]["lastOccurrence"] == "2024-01-01T08:00:00.000Z"


class TestSessionsApi:
    @pytest.mark.asyncio
    async def test_list_sessions_newest_activity_first(self, client, seed):
        await seed(
            {"session_uuid": "S1", "project_id": 1, "minutes": 0},
            {"session_uuid": "S2", "project_id": 1, "minutes": 5},
            {"session_uuid": "S1", "project_id": 1, "minutes": 10},
        )
        body = (await client.get("/sessions/project/1")).json()
        assert body["total"] == 2
        assert [s["uuid"] for s in body["sessions"]] == ["S1", "S2"]
        assert body["sessions"][0]["index"] == 1
        assert body["sessions"][0]["logCount"] == 2

    @pytest.mark.asyncio
    async def test_session_detail(self, client, seed):
        await seed(
            {"session_uuid": "S1", "key": "a", "minutes": 0},
            {"session_uuid": "S1", "key": "b", "minutes": 1},
        )
        body = (await client.get("/sessions/S1")).json()
        assert body["session"]["logCount"] == 2
        assert [log["key"] for log in body["logs"]] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_missing_session(self, client):
        resp = await client.get("/sessions/nope")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_organization_report(self, client, seed, project):
        await seed(
            {"session_uuid": "S1", "project_id": 1, "key": "temp", "value": "20", "minutes": 1},
            {"session_uuid": "S1", "project_id": 1, "key": "temp", "value": "25", "minutes": 2},
            {"session_uuid": "S2", "project_id": 1, "key": "humidity", "value": "40", "minutes": 3},
        )
        resp = await client.get(
            "/sessions/reports/project-organization",
            params={"projectId": 1, "startDate": "2024-01-01", "endDate": "2024-01-01"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["devices"] == ["S1", "S2"]
        assert body["keys"] == ["temp", "humidity"]
        assert body["columnLabels"] == ["Temperature", "humidity"]
        assert body["matrix"]["S1"]["temp"] == "25"
        assert body["sessionInfo"]["S2"] == {"index": 2, "startTime": "2024-01-01T08:03:00.000Z", "uuid": "S2"}
        assert (body["totalDevices"], body["totalKeys"], body["totalEntries"]) == (2, 2, 2)

    @pytest.mark.asyncio
    async def test_daily_report(self, client, seed, project):
        await seed(
            {"session_uuid": "S1", "project_id": 1, "key": "temp", "created_at": datetime(2024, 1, 1, 9)},
            {"session_uuid": "S3", "project_id": 1, "key": "temp", "created_at": datetime(2024, 1, 3, 9)},
        )
        body = (await client.get(
            "/sessions/reports/project-organization/daily",
            params={"projectId": 1, "startDate": "2024-01-01", "endDate": "2024-01-03"},
        )).json()
        assert [r["startDate"] for r in body["dailyReports"]] == ["2024-01-01", "2024-01-03"]
        assert body["combinedReport"]["totalDevices"] == 2

    @pytest.mark.asyncio
    async def test_organization_report_unknown_project(self, client):
        resp = await client.get(
            "/sessions/reports/project-organization",
            params={"projectId": 42, "startDate": "2024-01-01"},
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_organization_report_last_calendar_day(self, client, project):
        resp = await client.get(
            "/sessions/reports/project-organization",
            params={"projectId": 1, "startDate": "9999-12-31"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "invalid endDate"

    @pytest.mark.asyncio
    async def test_organization_report_bad_dates(self, client, project):
        resp = await client.get(
            "/sessions/reports/project-organization",
            params={"projectId": 1, "startDate": "2024-01-03", "endDate": "2024-01-01"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


class TestProjectsApi:
    @pytest.mark.asyncio
    async def test_create_list_get(self, client):
        created = await client.post(
            "/projects",
            json={"uuid": "p-1", "name": "Rig", "columnMapping": {"temp": "Temperature"}},
        )
        assert created.status_code == 201
        project_id = created.json()["id"]

        listed = (await client.get("/projects")).json()
        assert listed["total"] == 1

        fetched = (await client.get(f"/projects/{project_id}")).json()
        assert fetched["columnMapping"] == {"temp": "Temperature"}

    @pytest.mark.asyncio
    async def test_missing_project(self, client):
        assert (await client.get("/projects/123")).status_code == 404

    @pytest.mark.asyncio
    async def test_update_relabels_matrix_columns(self, client, seed, project):
        await seed({"session_uuid": "S1", "project_id": 1, "key": "humidity", "value": "40"})

        resp = await client.put("/projects/1", json={"name": "Climate rig", "columnMapping": {"humidity": "RH %"}})
        assert resp.status_code == 200
        body = resp.json()
        assert body["name"] == "Climate rig"
        assert body["uuid"] == "proj-0001"
        assert body["columnMapping"] == {"humidity": "RH %"}

        mapping = (await client.get("/projects/1/column-mapping")).json()
        assert mapping == {"projectId": 1, "columnMapping": {"humidity": "RH %"}}

        report = (await client.get(
            "/sessions/reports/project-organization",
            params={"projectId": 1, "startDate": "2024-01-01"},
        )).json()
        assert report["columnLabels"] == ["RH %"]

    @pytest.mark.asyncio
    async def test_update_duplicate_uuid(self, client, project):
        await client.post("/projects", json={"uuid": "p-2", "name": "Other"})
        resp = await client.put("/projects/1", json={"uuid": "p-2"})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "project uuid already exists"

    @pytest.mark.asyncio
    async def test_update_missing_project(self, client):
        resp = await client.put("/projects/404", json={"name": "Nope"})
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_delete_project_keeps_logs(self, client, seed, project):
        await seed({"project_id": 1, "key": "temp"})
        resp = await client.delete("/projects/1")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "deleted": 1}
        assert (await client.get("/projects/1")).status_code == 404
        assert (await client.delete("/projects/1")).status_code == 404
        assert (await client.get("/logs", params={"projectId": 1})).json()["pagination"]["total"] == 1
