"""Client for pushing postings into a remote job board's cache"""

import logging
from typing import List, Optional

import httpx

from gojobs.exceptions import AuthorizationError, UpstreamError
from gojobs.models.job import JobPosting


UPDATE_CACHE_PATH = "/api/update-cache"

logger = logging.getLogger("gojobs.service.pusher")


def push_postings(
    server_url: str,
    secret: str,
    postings: List[JobPosting],
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0
) -> int:
    """
    Send postings to a job board server's update-cache endpoint

    Used when fetching runs out-of-process (e.g. on a machine allowed to call
    the jobs API) and the server only serves the cache.

    Args:
        server_url: Base URL of the job board server
        secret: The server's admin secret
        postings: Postings to replace the server's snapshot with
        client: HTTP client to use (default: a new one)
        timeout: Request timeout in seconds

    Returns:
        Number of postings the server reports as cached

    Raises:
        AuthorizationError: If the server rejects the secret
        UpstreamError: On transport failure or any other non-2xx status
    """
    url = server_url.rstrip('/') + UPDATE_CACHE_PATH
    body = {'jobs': [posting.to_dict() for posting in postings], 'secret': secret}

    owns_client = client is None
    client = client or httpx.Client(timeout=timeout)
    try:
        logger.info(f"Pushing {len(postings)} jobs to {url}")
        response = client.post(url, json=body, timeout=timeout)
    except httpx.HTTPError as e:
        raise UpstreamError(f"Push to {url} failed: {type(e).__name__}: {e}")
    finally:
        if owns_client:
            client.close()

    if response.status_code == 403:
        raise AuthorizationError(f"Server at {server_url} rejected the cache secret")
    if not response.is_success:
        raise UpstreamError(f"Server returned status {response.status_code}", status_code=response.status_code)

    try:
        payload = response.json()
    except ValueError:
        payload = None
    count = payload.get('count', len(postings)) if isinstance(payload, dict) else len(postings)
    logger.info(f"Server cache updated with {count} jobs")
    return count
