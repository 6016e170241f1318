"""
Tests for the HTTP surface (src/api) — routes exercised end to end over
ASGI with in-memory SQLite and a mocked fetcher.
"""
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from api.main import app
from core.errors import FetchFailure
from workers.briefing.generator import NO_CHANGES_SUMMARY

HTML_V1 = "<html><body><h1>Pricing</h1><div>Pro 49 €</div></body></html>"
HTML_V2 = "<html><body><h1>Pricing</h1><div>Pro 59 €</div></body></html>"


@pytest.fixture
async def client(database):
    app.state.database = database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    del app.state.database


@pytest.fixture
async def page_id(client):
    project = (await client.post("/api/projects", json={"name": "Acme watch"})).json()
    competitor = (await client.post(
        f"/api/projects/{project['id']}/competitors",
        json={"name": "Acme", "website_url": "https://acme.example"},
    )).json()
    page = (await client.post(
        f"/api/competitors/{competitor['id']}/pages",
        json={"url": "https://acme.example/pricing", "page_type": "PRICING"},
    )).json()
    return page["id"]


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "competitive-watch"}


class TestSetupEndpoints:
    async def test_create_and_get_project(self, client):
        response = await client.post("/api/projects", json={"name": "  Acme watch  ", "description": "SaaS"})
        assert response.status_code == 201
        project = response.json()
        assert project["name"] == "Acme watch"
        assert project["frequency"] == "MANUAL"

        fetched = await client.get(f"/api/projects/{project['id']}")
        assert fetched.json()["id"] == project["id"]

        listed = await client.get("/api/projects")
        assert [p["id"] for p in listed.json()] == [project["id"]]

    async def test_unknown_project(self, client):
        response = await client.get("/api/projects/999")
        assert response.status_code == 404
        assert response.json() == {"message": "Project 999 not found"}

    async def test_non_positive_id_rejected(self, client):
        assert (await client.get("/api/projects/0")).status_code == 422

    async def test_competitor_for_unknown_project(self, client):
        response = await client.post("/api/projects/42/competitors", json={"name": "Ghost"})
        assert response.status_code == 404

    async def test_page_requires_valid_url(self, client):
        project = (await client.post("/api/projects", json={"name": "P"})).json()
        competitor = (await client.post(f"/api/projects/{project['id']}/competitors", json={"name": "C"})).json()
        response = await client.post(f"/api/competitors/{competitor['id']}/pages", json={"url": "not a url"})
        assert response.status_code == 422

    async def test_get_page(self, client, page_id):
        response = await client.get(f"/api/monitored-pages/{page_id}")
        assert response.status_code == 200
        assert response.json()["page_type"] == "PRICING"


class TestScrapeEndpoint:
    async def test_capture_then_change(self, client, page_id):
        with patch(
            "workers.web_monitor.orchestrator.fetch_page_html",
            new_callable=AsyncMock,
            side_effect=[HTML_V1, HTML_V2],
        ):
            first = await client.post(f"/api/monitored-pages/{page_id}/scrape")
            second = await client.post(f"/api/monitored-pages/{page_id}/scrape")

        assert first.status_code == 201
        body = first.json()
        assert body["has_change"] is False
        assert body["change"] is None
        assert body["message"] == "Snapshot created, no major change detected."
        assert body["snapshot"]["extracted_pricing"][0]["amount"] == 49.0

        body = second.json()
        assert body["has_change"] is True
        assert body["change"]["change_type"] == "PRICE"
        assert body["change"]["old_snapshot_id"] == first.json()["snapshot"]["id"]

        history = await client.get(f"/api/monitored-pages/{page_id}/changes")
        assert [c["change_type"] for c in history.json()] == ["PRICE"]

    async def test_fetch_failure_is_bad_gateway(self, client, page_id):
        with patch(
            "workers.web_monitor.orchestrator.fetch_page_html",
            new_callable=AsyncMock,
            side_effect=FetchFailure("https://acme.example/pricing", status_code=503),
        ):
            response = await client.post(f"/api/monitored-pages/{page_id}/scrape")

        assert response.status_code == 502
        assert response.json()["status_code"] == 503

        history = await client.get(f"/api/monitored-pages/{page_id}/changes")
        assert history.json() == []

    async def test_unknown_page(self, client):
        response = await client.post("/api/monitored-pages/999/scrape")
        assert response.status_code == 404


class TestReportEndpoints:
    async def test_report_without_changes(self, client, page_id):
        project_id = (await client.get("/api/projects")).json()[0]["id"]
        response = await client.post(
            f"/api/projects/{project_id}/reports",
            json={"periodStart": "2025-01-01T00:00:00Z", "periodEnd": "2025-01-08T00:00:00Z"},
        )
        assert response.status_code == 201
        report = response.json()
        assert report["ai_summary"] == NO_CHANGES_SUMMARY
        assert report["highlights"] == []

        listed = await client.get(f"/api/projects/{project_id}/reports")
        assert [r["id"] for r in listed.json()] == [report["id"]]

    async def test_report_for_unknown_project(self, client):
        response = await client.post("/api/projects/999/reports", json={})
        assert response.status_code == 404
