from datetime import datetime, timezone

import httpx
import pytest

from github_gsa_feed.domain.entities import Owner, OwnerKind
from github_gsa_feed.infrastructure.github_rest_adapter import (
    GitHubRestAdapter,
    normalize_base_url,
    parse_timestamp,
)

GH = "https://gh.test/"

USERS = [
    {
        "login": "alice",
        "type": "User",
        "repos_url": f"{GH}api/v3/users/alice/repos",
        "html_url": f"{GH}alice",
    },
    {"type": "User", "repos_url": f"{GH}api/v3/users/ghost/repos"},
]

ORGS = [
    {"login": "acme", "repos_url": f"{GH}api/v3/orgs/acme/repos", "description": "We build things"},
]

ACME_REPOS = [
    {
        "name": "rocket",
        "description": "Goes up",
        "html_url": f"{GH}acme/rocket",
        "contents_url": f"{GH}api/v3/repos/acme/rocket/contents/{{+path}}",
        "language": "Python",
        "stargazers_count": 5,
        "forks_count": 2,
        "default_branch": "master",
        "updated_at": "2015-11-15T04:58:08Z",
    },
    {
        "name": "no-readme",
        "description": None,
        "html_url": f"{GH}acme/no-readme",
        "contents_url": f"{GH}api/v3/repos/acme/no-readme/contents/{{+path}}",
        "language": None,
        "stargazers_count": 0,
        "forks_count": 0,
        "default_branch": "main",
        "updated_at": "yesterday",
    },
    {"name": "broken", "html_url": f"{GH}acme/broken"},
]

READMES = {
    "/api/v3/repos/acme/rocket/contents/README.md": (
        200,
        {
            "html_url": f"{GH}acme/rocket/blob/master/README.md",
            "download_url": f"{GH}raw/acme/rocket/master/README.md",
            "size": 120,
        },
    ),
    "/api/v3/repos/acme/no-readme/contents/README.md": (404, {"message": "Not Found"}),
}


def _handler(request):
    path = request.url.path
    if path == "/api/v3/users":
        assert request.url.params["per_page"] == "100"
        return httpx.Response(200, json=USERS)
    if path == "/api/v3/organizations":
        return httpx.Response(200, json=ORGS)
    if path == "/api/v3/orgs/acme/repos":
        return httpx.Response(200, json=ACME_REPOS)
    if path in READMES:
        status, body = READMES[path]
        return httpx.Response(status, json=body)
    return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def adapter():
    client = httpx.Client(transport=httpx.MockTransport(_handler))
    return GitHubRestAdapter(client, "https://gh.test")


def _acme():
    return Owner(
        name="acme",
        kind=OwnerKind.ORGANIZATION,
        repository_list_url=f"{GH}api/v3/orgs/acme/repos",
        display_url=f"{GH}acme",
        description="We build things",
    )


def test_base_url_gets_single_trailing_slash():
    assert normalize_base_url("https://gh.test") == GH
    assert normalize_base_url(" https://gh.test// ") == GH
    with pytest.raises(ValueError):
        normalize_base_url("  ")


def test_list_users_skips_malformed_elements(adapter):
    batch = adapter.list_users()

    assert [owner.name for owner in batch] == ["alice"]
    alice = batch.items[0]
    assert alice.kind is OwnerKind.USER
    assert alice.display_url == f"{GH}alice"
    assert len(batch.failures) == 1
    assert batch.failures[0].identity == "User[1]"


def test_list_organizations_sets_kind_and_synthesises_display_url(adapter):
    batch = adapter.list_organizations()

    assert len(batch) == 1
    acme = batch.items[0]
    assert acme.kind is OwnerKind.ORGANIZATION
    assert acme.display_url == f"{GH}acme"
    assert acme.description == "We build things"


def test_list_repositories_enriches_with_readme(adapter):
    batch = adapter.list_repositories(_acme())

    assert [repo.name for repo in batch] == ["rocket", "no-readme"]
    assert [failure.identity for failure in batch.failures] == ["broken"]

    rocket, no_readme = batch.items
    assert rocket.owner.name == "acme"
    assert rocket.stargazer_count == 5
    assert rocket.fork_count == 2
    assert rocket.default_branch == "master"
    assert rocket.last_updated_at == datetime(2015, 11, 15, 4, 58, 8, tzinfo=timezone.utc)
    assert rocket.readme.display_url == f"{GH}acme/rocket/blob/master/README.md"
    assert rocket.readme.raw_content_url == f"{GH}raw/acme/rocket/master/README.md"
    assert rocket.readme.size == 120

    assert no_readme.readme is None
    assert no_readme.last_updated_at is None
    assert no_readme.description is None


def test_list_repositories_without_list_url_reports_failure(adapter):
    owner = Owner(name="lonely", kind=OwnerKind.USER)
    batch = adapter.list_repositories(owner)

    assert len(batch) == 0
    assert batch.failures[0].identity == "User:lonely"


def test_get_readme_requires_display_url():
    def handler(request):
        return httpx.Response(200, json={"download_url": "https://raw/x", "size": 3})

    adapter = GitHubRestAdapter(httpx.Client(transport=httpx.MockTransport(handler)), GH)
    assert adapter.get_readme(f"{GH}api/v3/repos/a/b/contents/README.md") is None


def test_fake_urls_are_built_under_description(adapter):
    acme = _acme()
    assert adapter.fake_owner_url(acme) == "https://gh.test/description/acme"
    repo = adapter.list_repositories(acme).items[0]
    assert adapter.fake_repository_url(repo) == "https://gh.test/description/acme/rocket"


def test_parse_timestamp():
    assert parse_timestamp(None) is None
    assert parse_timestamp("2015-08-20T15:45:46Z") == datetime(2015, 8, 20, 15, 45, 46, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        parse_timestamp("20/08/2015")


def test_unusable_readme_url_only_costs_that_repository_its_readme():
    repos = [
        {
            "name": "odd",
            "description": "Bad contents address",
            "html_url": f"{GH}acme/odd",
            "contents_url": "https://gh.test:notaport/api/v3/repos/acme/odd/contents/{+path}",
            "default_branch": "main",
            "stargazers_count": 0,
            "forks_count": 0,
        },
        ACME_REPOS[0],
    ]

    def handler(request):
        if request.url.path == "/api/v3/orgs/acme/repos":
            return httpx.Response(200, json=repos)
        return _handler(request)

    adapter = GitHubRestAdapter(httpx.Client(transport=httpx.MockTransport(handler)), GH)
    batch = adapter.list_repositories(_acme())

    assert [repo.name for repo in batch] == ["odd", "rocket"]
    assert batch.items[0].readme is None
    assert batch.items[1].readme is not None
    assert batch.failures == []
