from gojobs.utils.summary_generator import calculate_percentage, generate_summary, summarize_companies


def test_companies_ordered_by_job_count(make_posting):
    postings = [
        make_posting("1", company="Acme"),
        make_posting("2", company="Globex", company_logo="https://logo.test/globex.png"),
        make_posting("3", company="Initech"),
        make_posting("4", company="Globex", company_logo="https://logo.test/other.png"),
        make_posting("5", company="Acme", company_logo="https://logo.test/acme.png"),
        make_posting("6", company="Globex"),
        make_posting("7", company=""),
    ]

    companies = summarize_companies(postings)

    assert [(company.name, company.job_count) for company in companies] == [
        ("Globex", 3), ("Acme", 2), ("Initech", 1)
    ]
    assert companies[0].logo == "https://logo.test/globex.png"
    assert companies[1].logo == "https://logo.test/acme.png"
    assert companies[2].logo == ""


def test_company_search(make_posting):
    postings = [make_posting("1", company="Acme"), make_posting("2", company="Globex")]
    assert [company.name for company in summarize_companies(postings, search="GLO")] == ["Globex"]
    assert summarize_companies(postings, search="umbrella") == []


def test_companies_of_empty_board():
    assert summarize_companies([]) == []


def test_generate_summary(make_posting):
    postings = [
        make_posting("1", job_type="Full-time", location="Lagos", tags=["go", "grpc"]),
        make_posting("2", job_type="Full-time", location="Remote", is_remote=True, tags=["go"]),
        make_posting("3", job_type="Contract", location="Lagos"),
        make_posting("4", job_type="", location="Lagos", is_remote=True),
    ]

    summary = generate_summary(postings)

    assert summary.total_jobs == 4
    assert summary.remote_jobs == 2
    assert summary.remote_percentage == 50.0
    assert [(item.name, item.count) for item in summary.job_types] == [("Full-time", 2), ("Contract", 1)]
    assert summary.locations[0].name == "Lagos"
    assert summary.locations[0].percentage == 75.0
    assert [(item.name, item.count) for item in summary.tags] == [("go", 2), ("grpc", 1)]

    data = summary.to_dict()
    assert data["total_jobs"] == 4
    assert isinstance(data["generated_at"], str)


def test_generate_summary_of_empty_board():
    summary = generate_summary([])
    assert summary.total_jobs == 0
    assert summary.job_types == []


def test_calculate_percentage():
    assert calculate_percentage(1, 3) == 33.33
    assert calculate_percentage(5, 0) == 0.0
