import pytest

from gojobs.services.job_listing import filter_jobs, find_job, posted_date, sort_newest, unique_values


@pytest.fixture
def postings(make_posting):
    return [
        make_posting("go-1", job_type="Full-time", location="Lagos", posted_at="2024-05-01T10:00:00Z"),
        make_posting("go-2", job_type="Contract", location="Remote", is_remote=True,
                     company="Globex", posted_at="2024-05-03T10:00:00Z"),
        make_posting("go-3", job_type="Full-time", location="Abuja", is_remote=True,
                     description="Work on Kubernetes operators", date_gotten="2024-05-02T08:00:00"),
        make_posting("go-4", job_type="Full-time", location="Lagos", posted_at="not a date"),
    ]


def ids(postings):
    return [posting.job_id for posting in postings]


def test_no_filters_returns_everything(postings):
    assert ids(filter_jobs(postings)) == ["go-1", "go-2", "go-3", "go-4"]


def test_filter_by_job_type_and_location(postings):
    assert ids(filter_jobs(postings, job_type="Full-time", location="Lagos")) == ["go-1", "go-4"]


def test_remote_only(postings):
    assert ids(filter_jobs(postings, remote_only=True)) == ["go-2", "go-3"]


def test_company_filter(postings):
    assert ids(filter_jobs(postings, company="Globex")) == ["go-2"]


def test_search_is_case_insensitive(postings):
    assert ids(filter_jobs(postings, search="KUBERNETES")) == ["go-3"]
    assert ids(filter_jobs(postings, search="globex")) == ["go-2"]


def test_sort_newest_puts_undated_last(postings):
    assert ids(sort_newest(postings)) == ["go-2", "go-3", "go-1", "go-4"]


def test_posted_date_falls_back_to_collection_date(postings):
    assert posted_date(postings[2]).isoformat() == "2024-05-02T08:00:00+00:00"
    assert posted_date(postings[3]) is None


def test_find_job_prefers_public_id(make_posting):
    first = make_posting("shared")
    second = make_posting("other")
    second.id = "shared"
    assert find_job([second, first], "shared") is first
    assert find_job([first, second], "api-shared") is first
    assert find_job([first], "missing") is None


def test_unique_values(postings):
    assert unique_values(postings, "location") == ["Abuja", "Lagos", "Remote"]
    assert unique_values(postings, "job_type") == ["Contract", "Full-time"]
