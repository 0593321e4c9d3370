import httpx
import pytest
from fastapi.testclient import TestClient

from gojobs.api import create_app
from gojobs.models.config import ApiConfig, AppConfig, CacheConfig, SchedulerConfig
from gojobs.services.job_fetcher import JobFetcher

from tests.conftest import API_KEY, API_URL, PORTUGUESE_DESCRIPTION, api_job, five_jobs_two_portuguese


SECRET = "s3cret"


@pytest.fixture
def upstream():
    """Mutable jobs API stub; tests change status or payload as needed"""
    state = {"status": 200, "payload": {"data": five_jobs_two_portuguese()}, "calls": []}

    def handler(request):
        state["calls"].append(request)
        return httpx.Response(state["status"], json=state["payload"])

    state["handler"] = handler
    return state


@pytest.fixture
def app_config(cache_path):
    return AppConfig(
        admin_secret=SECRET,
        api=ApiConfig(url=API_URL, key=API_KEY),
        cache=CacheConfig(path=str(cache_path)),
        scheduler=SchedulerConfig(enabled=False),
    )


@pytest.fixture
def build_client(upstream, file_cache):
    def factory(config):
        fetcher = JobFetcher(
            config.api,
            file_cache,
            client=httpx.Client(transport=httpx.MockTransport(upstream["handler"])),
        )
        return TestClient(create_app(config, fetcher=fetcher, start_scheduler=False))
    return factory


@pytest.fixture
def client(build_client, app_config):
    return build_client(app_config)


def test_root(client):
    assert "message" in client.get("/").json()


class TestJobs:
    def test_first_listing_fetches_and_filters(self, client, upstream):
        response = client.get("/api/jobs")

        assert response.status_code == 200
        body = response.json()
        assert [job["job_id"] for job in body["data"]] == ["go-1", "go-3", "go-5"]
        assert body["count"] == 3
        assert body["total"] == 3
        assert body["last_fetched"] is not None
        assert body["locations"] == ["Lagos"]
        assert body["job_types"] == ["Full-time"]
        assert len(upstream["calls"]) == 1

    def test_listing_is_served_from_cache(self, client, upstream):
        client.get("/api/jobs")
        client.get("/api/jobs")
        assert len(upstream["calls"]) == 1

    def test_remote_view(self, client):
        body = client.get("/api/jobs", params={"filter": "remote"}).json()
        assert [job["job_id"] for job in body["data"]] == ["go-3"]

    def test_unknown_view_is_rejected(self, client):
        assert client.get("/api/jobs", params={"filter": "oldest"}).status_code == 422

    def test_limit_and_search(self, client):
        body = client.get("/api/jobs", params={"limit": 1}).json()
        assert body["count"] == 1
        assert body["total"] == 3

        body = client.get("/api/jobs", params={"company": "Globex"}).json()
        assert [job["job_id"] for job in body["data"]] == ["go-5"]

    def test_job_detail(self, client):
        body = client.get("/api/jobs/go-3").json()
        assert body["data"]["job_id"] == "go-3"
        assert body["description_blocks"][0]["kind"] == "paragraph"

    def test_job_detail_by_api_id(self, client):
        assert client.get("/api/jobs/api-go-5").json()["data"]["job_id"] == "go-5"

    def test_unknown_job(self, client):
        response = client.get("/api/jobs/go-2")
        assert response.status_code == 404
        assert response.json() == {"error": "Job not found"}

    def test_companies(self, client):
        body = client.get("/api/companies").json()
        assert [(company["name"], company["job_count"]) for company in body["data"]] == [("Acme", 2), ("Globex", 1)]
        assert client.get("/api/companies", params={"search": "glob"}).json()["count"] == 1

    def test_stats(self, client):
        body = client.get("/api/stats").json()
        assert body["total_jobs"] == 3
        assert body["remote_jobs"] == 1

    def test_upstream_failure_with_empty_cache_serves_empty_list(self, client, upstream):
        upstream["status"] = 500
        body = client.get("/api/jobs").json()
        assert body["data"] == []
        assert body["last_fetched"] is None


class TestRunScheduler:
    def test_requires_secret(self, client, upstream):
        assert client.get("/api/run-scheduler").status_code == 403
        response = client.get("/api/run-scheduler", params={"secret": "wrong"})
        assert response.status_code == 403
        assert response.json() == {"error": "Unauthorized"}
        assert upstream["calls"] == []

    def test_runs_fetch(self, client, file_cache):
        response = client.get("/api/run-scheduler", params={"secret": SECRET})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "updated"
        assert body["count"] == 3
        assert body["removed"] == 2
        assert len(file_cache.read().postings) == 3

    def test_upstream_failure_keeps_cache(self, client, upstream, cache_path):
        client.get("/api/run-scheduler", params={"secret": SECRET})
        original = cache_path.read_bytes()
        upstream["status"] = 500

        response = client.get("/api/run-scheduler", params={"secret": SECRET})

        assert response.status_code == 502
        assert response.json()["success"] is False
        assert cache_path.read_bytes() == original

    def test_fetch_in_progress(self, client, upstream):
        fetcher = client.app.state.services.fetcher
        fetcher._fetch_lock.acquire()
        try:
            response = client.get("/api/run-scheduler", params={"secret": SECRET})
        finally:
            fetcher._fetch_lock.release()

        assert response.status_code == 409
        assert upstream["calls"] == []

    def test_missing_api_configuration(self, build_client, app_config):
        app_config.api = ApiConfig(url="", key=API_KEY)
        response = build_client(app_config).get("/api/run-scheduler", params={"secret": SECRET})
        assert response.status_code == 500
        assert "API_URL" in response.json()["error"]

    def test_rejected_when_no_secret_is_configured(self, build_client, app_config):
        app_config.admin_secret = ""
        response = build_client(app_config).get("/api/run-scheduler", params={"secret": "anything"})
        assert response.status_code == 403


class TestClearCache:
    def test_must_be_post(self, client):
        assert client.get("/api/clear-cache", params={"secret": SECRET}).status_code == 405

    def test_requires_secret(self, client, file_cache, make_posting):
        file_cache.write([make_posting()])
        assert client.post("/api/clear-cache").status_code == 403
        assert file_cache.read() is not None

    def test_clears(self, client, file_cache, make_posting):
        file_cache.write([make_posting()])

        response = client.post("/api/clear-cache", params={"secret": SECRET})
        assert response.json() == {"success": True, "message": "Cache cleared"}
        assert file_cache.read() is None

        response = client.post("/api/clear-cache", params={"secret": SECRET})
        assert response.json()["message"] == "No cache found to clear"


class TestUpdateCache:
    def test_requires_secret(self, client, file_cache):
        response = client.post("/api/update-cache", json={"jobs": [api_job("x")], "secret": "wrong"})
        assert response.status_code == 403
        assert client.post("/api/update-cache", json={}).status_code == 403
        assert file_cache.read() is None

    @pytest.mark.parametrize("jobs", [None, "nope", {"job_id": "x"}, ["not a job"]])
    def test_rejects_invalid_jobs(self, client, jobs):
        response = client.post("/api/update-cache", json={"jobs": jobs, "secret": SECRET})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid jobs data"}

    def test_replaces_snapshot(self, client, file_cache, upstream):
        jobs = [
            api_job("push-1"),
            api_job("push-2", title="Analista", description=PORTUGUESE_DESCRIPTION),
            api_job("push-1", title="duplicate"),
        ]

        response = client.post("/api/update-cache", json={"jobs": jobs, "secret": SECRET})

        assert response.status_code == 200
        assert response.json()["count"] == 2
        assert [posting.job_id for posting in file_cache.read().postings] == ["push-1", "push-2"]
        assert upstream["calls"] == []

    def test_accepts_empty_list(self, client, file_cache):
        response = client.post("/api/update-cache", json={"jobs": [], "secret": SECRET})
        assert response.json()["count"] == 0
        assert file_cache.read().postings == []


def test_health_does_not_fetch(client, upstream):
    body = client.get("/api/health").json()

    assert body["status"] == "ok"
    assert body["cache"] == {"backend": "file", "jobs": 0, "last_fetched": None, "expired": True}
    assert body["fetching"] is False
    assert body["scheduler"] == {}
    assert upstream["calls"] == []


def test_cors_preflight(build_client, app_config):
    app_config.api = ApiConfig(url=API_URL, key=API_KEY, origin="https://board.test")
    response = build_client(app_config).options(
        "/api/jobs",
        headers={"Origin": "https://board.test", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://board.test"


def test_scheduler_runs_for_the_app_lifetime(upstream, file_cache, app_config):
    app_config.scheduler = SchedulerConfig(enabled=True)
    fetcher = JobFetcher(
        app_config.api,
        file_cache,
        client=httpx.Client(transport=httpx.MockTransport(upstream["handler"])),
    )
    app = create_app(app_config, fetcher=fetcher)

    with TestClient(app) as client:
        status = client.get("/api/health").json()["scheduler"]["scheduler"]
        assert status["running"] is True

    assert app.state.services.scheduler.is_running() is False
    assert upstream["calls"] == []
