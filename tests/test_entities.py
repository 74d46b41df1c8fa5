import pytest

from github_gsa_feed.domain.entities import Owner, OwnerKind, ReadmeFile, Repository


def _owner(**kwargs):
    defaults = {"name": "acme", "kind": OwnerKind.ORGANIZATION}
    defaults.update(kwargs)
    return Owner(**defaults)


def test_owner_identity_string_is_kind_and_name():
    assert str(_owner()) == "Organization:acme"
    assert str(_owner(name="alice", kind=OwnerKind.USER)) == "User:alice"


def test_owner_accepts_kind_as_wire_string():
    owner = _owner(kind="User")
    assert owner.kind is OwnerKind.USER
    assert not owner.is_organization


def test_blank_text_fields_are_normalised_to_none():
    owner = _owner(description="   ", display_url="", repository_list_url="\t")
    assert owner.description is None
    assert owner.display_url is None
    assert owner.repository_list_url is None

    repo = Repository(owner=owner, name="rocket", description=" \n ", language="")
    assert repo.description is None
    assert repo.language is None


def test_owner_requires_a_name():
    with pytest.raises(ValueError):
        _owner(name="  ")


def test_repository_requires_an_owner():
    with pytest.raises(ValueError):
        Repository(owner=None, name="rocket")


def test_repository_rejects_negative_counters():
    with pytest.raises(ValueError):
        Repository(owner=_owner(), name="rocket", fork_count=-1)


def test_repository_identity_string_is_owner_slash_name():
    repo = Repository(owner=_owner(), name="rocket")
    assert str(repo) == "acme/rocket"
    assert repo.full_name == "acme/rocket"


def test_readme_requires_display_url():
    with pytest.raises(ValueError):
        ReadmeFile(display_url="", raw_content_url="https://raw/x", size=10)


@pytest.mark.parametrize(
    "readme",
    [
        ReadmeFile(display_url="https://gh/acme/rocket/README.md", raw_content_url="https://raw/r", size=0),
        ReadmeFile(display_url="https://gh/acme/rocket/README.md", raw_content_url="https://raw/r", size=-1),
        ReadmeFile(display_url="https://gh/acme/rocket/README.md", raw_content_url=None, size=40),
    ],
)
def test_unusable_readme_is_dropped_from_repository(readme):
    repo = Repository(owner=_owner(), name="rocket", readme=readme)
    assert repo.readme is None


def test_usable_readme_is_kept():
    readme = ReadmeFile(display_url="https://gh/acme/rocket/README.md", raw_content_url="https://raw/r", size=12)
    repo = Repository(owner=_owner(), name="rocket", readme=readme)
    assert repo.readme is readme


def test_readme_lookup_url_fills_path_placeholder():
    repo = Repository(
        owner=_owner(),
        name="rocket",
        contents_template_url="https://gh/api/v3/repos/acme/rocket/contents/{+path}",
    )
    assert repo.readme_lookup_url() == "https://gh/api/v3/repos/acme/rocket/contents/README.md"
    assert Repository(owner=_owner(), name="rocket").readme_lookup_url() is None
