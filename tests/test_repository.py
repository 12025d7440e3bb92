"""Tests for RepositoryDescriptor and destination naming."""

from __future__ import annotations

import dataclasses

import pytest

from repository import RepositoryDescriptor
from utils import build_destination_name, sanitize_repo_name


def _make_repo(**overrides: str) -> RepositoryDescriptor:
    values = {
        'name': 'repoA',
        'clone_url': 'https://github.com/alice/repoA.git',
        'clone_username': 'alice',
        'clone_password': 'ghp_secret',
        'destination_owner': 'alice',
        'destination_name': 'repoA',
    }
    values.update(overrides)
    return RepositoryDescriptor(**values)


def test_descriptor_key_and_full_name() -> None:
    """Owner and destination name form the reconciliation key."""
    repo = _make_repo(destination_name='gh-repoA')

    assert repo.key == ('alice', 'gh-repoA')
    assert repo.full_name == 'alice/gh-repoA'


@pytest.mark.parametrize('field', ['name', 'clone_url', 'destination_owner', 'destination_name'])
def test_descriptor_rejects_empty_required_fields(field: str) -> None:
    """Required fields must be non-empty."""
    with pytest.raises(ValueError):
        _make_repo(**{field: ''})


def test_descriptor_is_immutable_and_hides_password() -> None:
    """Descriptors cannot be changed and never print the password."""
    repo = _make_repo()

    with pytest.raises(dataclasses.FrozenInstanceError):
        repo.clone_password = 'other'  # type: ignore[misc]
    assert 'ghp_secret' not in repr(repo)


@pytest.mark.parametrize(
    'name,prefix,expected',
    [
        ('tools', None, 'tools'),
        ('tools', '', 'tools'),
        ('tools', 'gh-', 'gh-tools'),
        ('My Project', 'gl_', 'gl_My-Project'),
        ('.github', '', '.github'),
        ('-dash', '', '-dash'),
        ('repo.', '', 'repo.'),
        ('a--b', '', 'a--b'),
    ],
)
def test_build_destination_name(name: str, prefix: str, expected: str) -> None:
    """The prefix is prepended verbatim; accepted names pass through unchanged."""
    assert build_destination_name(name, prefix) == expected


def test_distinct_source_names_keep_distinct_keys() -> None:
    """'.github' and 'github' must not collapse onto one mirror."""
    assert build_destination_name('.github', '') != build_destination_name('github', '')


def test_sanitize_repo_name_replaces_rejected_runs() -> None:
    """Runs of rejected characters become a single dash."""
    assert sanitize_repo_name('a / b') == 'a-b'
