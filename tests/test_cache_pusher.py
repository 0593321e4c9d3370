import json

import httpx
import pytest

from gojobs.exceptions import AuthorizationError, UpstreamError
from gojobs.services.cache_pusher import push_postings


def make_client(status_code, payload, calls):
    def handler(request):
        calls.append(request)
        return httpx.Response(status_code, json=payload)
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_push_sends_jobs_and_secret(make_posting):
    calls = []
    client = make_client(200, {"success": True, "count": 2}, calls)

    count = push_postings("https://board.test/", "s3cret", [make_posting("go-1"), make_posting("go-2")], client=client)

    assert count == 2
    request = calls[0]
    assert request.method == "POST"
    assert str(request.url) == "https://board.test/api/update-cache"
    body = json.loads(request.content)
    assert body["secret"] == "s3cret"
    assert [job["job_id"] for job in body["jobs"]] == ["go-1", "go-2"]


def test_push_rejected_secret(make_posting):
    client = make_client(403, {"error": "Unauthorized"}, [])
    with pytest.raises(AuthorizationError):
        push_postings("https://board.test", "wrong", [make_posting()], client=client)


def test_push_server_error(make_posting):
    client = make_client(500, {"error": "Failed to update cache"}, [])
    with pytest.raises(UpstreamError) as excinfo:
        push_postings("https://board.test", "s3cret", [make_posting()], client=client)
    assert excinfo.value.status_code == 500


def test_push_transport_error(make_posting):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError):
        push_postings("https://board.test", "s3cret", [make_posting()], client=client)


@pytest.mark.parametrize("content", [b"", b"ok", b"[1, 2]"])
def test_push_success_without_json_object_body(make_posting, content):
    def handler(request):
        return httpx.Response(200, content=content)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    count = push_postings("https://board.test", "s3cret", [make_posting("go-1"), make_posting("go-2")], client=client)

    assert count == 2
