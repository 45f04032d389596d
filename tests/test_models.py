from __future__ import annotations

from datetime import datetime, timezone

import pytest

from repo_analytics.errors import ValidationError
from repo_analytics.models import CommitEntry, RepositoryIdentifier, RepositoryMetadata


def test_identifier_parses_owner_and_name():
    identifier = RepositoryIdentifier.parse("  facebook/react ")

    assert identifier.owner == "facebook"
    assert identifier.name == "react"
    assert identifier.full_name == "facebook/react"
    assert str(identifier) == "facebook/react"


@pytest.mark.parametrize("value", ["react", "", "   ", None, "/react", "facebook/", "a/b/c"])
def test_identifier_rejects_malformed_values(value):
    with pytest.raises(ValidationError):
        RepositoryIdentifier.parse(value)


def test_repository_metadata_from_api_parses_fields():
    identifier = RepositoryIdentifier("acme", "demo")
    payload = {
        "description": None,
        "html_url": "https://github.com/acme/demo",
        "stargazers_count": 42,
        "forks_count": 3,
        "watchers_count": 42,
        "open_issues_count": 5,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-01-10T00:00:00Z",
        "size": 99,
        "default_branch": "main",
    }

    metadata = RepositoryMetadata.from_api(identifier, payload)

    assert metadata.full_name == "acme/demo"
    assert metadata.description == "No description available"
    assert metadata.stars == 42
    assert metadata.open_issues == 5
    assert metadata.updated_at == datetime(2024, 1, 10, tzinfo=timezone.utc)


def test_commit_entry_prefers_linked_account():
    payload = {
        "sha": "abc",
        "html_url": "https://github.com/acme/demo/commit/abc",
        "commit": {
            "message": "Fix bug\n\nDetails",
            "author": {"name": "Jane Doe", "email": "jane@example.com", "date": "2024-01-09T12:00:00Z"},
        },
        "author": {"login": "jane", "avatar_url": "https://avatars.example/jane"},
    }

    entry = CommitEntry.from_api(payload)

    assert entry.message == "Fix bug"
    assert entry.author == "jane"
    assert entry.author_name == "Jane Doe"
    assert entry.avatar_url == "https://avatars.example/jane"
    assert entry.date == datetime(2024, 1, 9, 12, tzinfo=timezone.utc)


def test_commit_entry_without_account_uses_identicon():
    payload = {
        "sha": "def",
        "html_url": "",
        "commit": {"message": "Initial", "author": {"name": "Anon", "email": "anon@example.com", "date": None}},
        "author": None,
    }

    entry = CommitEntry.from_api(payload)

    assert entry.author == "Anon"
    assert entry.avatar_url == "https://github.com/identicons/anon@example.com.png"
    assert entry.date is None
