import json

import httpx
import pytest

from gojobs.models.config import ApiConfig
from gojobs.models.job import JobPosting
from gojobs.services.job_cache import FileJobCache
from gojobs.services.job_fetcher import JobFetcher


API_URL = "https://jobs.test/api/jobs"
API_KEY = "test-key"

PORTUGUESE_DESCRIPTION = (
    "Buscamos profissional para atividades de manutenção preventiva e corretiva, "
    "suporte à equipe e garantir o funcionamento dos equipamentos."
)


def api_job(job_id, title="Golang Developer", description="Build backend services in Go.", **extra):
    """A posting as the jobs API returns it"""
    job = {
        "id": f"api-{job_id}",
        "job_id": job_id,
        "title": title,
        "company": extra.pop("company", "Acme"),
        "description": description,
        "location": extra.pop("location", "Lagos"),
        "job_type": extra.pop("job_type", "Full-time"),
        "is_remote": extra.pop("is_remote", False),
        "posted_at": extra.pop("posted_at", "2024-05-01T10:00:00Z"),
    }
    job.update(extra)
    return job


def five_jobs_two_portuguese():
    return [
        api_job("go-1"),
        api_job("go-2", title="Desenvolvedor Go", description=PORTUGUESE_DESCRIPTION),
        api_job("go-3", is_remote=True),
        api_job("go-4", title="Analista", description=PORTUGUESE_DESCRIPTION),
        api_job("go-5", company="Globex"),
    ]


def json_handler(payload, status_code=200, calls=None):
    """MockTransport handler answering every request with payload"""
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload)
    return handler


@pytest.fixture
def make_posting():
    def factory(job_id="job-1", **fields):
        fields.setdefault("title", "Golang Developer")
        fields.setdefault("company", "Acme")
        fields.setdefault("description", "Build backend services in Go.")
        return JobPosting(id=f"api-{job_id}", job_id=job_id, **fields)
    return factory


@pytest.fixture
def api_config():
    return ApiConfig(url=API_URL, key=API_KEY, origin="https://gojobs.test")


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "job-cache.json"


@pytest.fixture
def file_cache(cache_path):
    return FileJobCache(str(cache_path))


@pytest.fixture
def make_fetcher(api_config, file_cache):
    def factory(handler, config=None, cache=None):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return JobFetcher(config or api_config, cache or file_cache, client=client)
    return factory


def read_json(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)
