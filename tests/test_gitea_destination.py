"""Tests for the Gitea destination client."""

from __future__ import annotations

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from config import DestinationConfig
from exceptions import (AlreadyExistsError, ConfigurationError, MigrationError,
                        ProbeError, SyncError, TransportError)
from gitea_destination import GiteaDestination
from logging_utils import Logger
from repository import RepositoryDescriptor


def _make_destination(session: Optional[Any] = None, **overrides: str) -> GiteaDestination:
    values = {
        'url': 'https://gitea.example.com/',
        'api_key': 'gitea-key',
        'data_path': '/var/lib/gitea',
    }
    values.update(overrides)
    return GiteaDestination(
        DestinationConfig(**values),
        timeout=5.0,
        logger=Logger(),
        session=session if session is not None else MagicMock(),
    )


def _response(status: int, body: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    if body is None:
        response.json.side_effect = ValueError('no json body')
    else:
        response.json.return_value = body
    return response


def _make_repo() -> RepositoryDescriptor:
    return RepositoryDescriptor(
        name='repoA',
        clone_url='https://github.com/alice/repoA.git',
        clone_username='alice',
        clone_password='ghp_secret',
        destination_owner='alice',
        destination_name='repoA',
    )


@pytest.mark.parametrize('field', ['url', 'api_key'])
def test_missing_url_or_key_is_configuration_error(field: str) -> None:
    """Both the URL and the API key are required to build the client."""
    with pytest.raises(ConfigurationError):
        _make_destination(**{field: ''})


def test_session_carries_token_header() -> None:
    """Every request is authenticated with the static token."""
    destination = _make_destination(session=requests.Session())

    assert destination.session.headers['Authorization'] == 'token gitea-key'
    assert destination.api_url == 'https://gitea.example.com/api/v1'


@pytest.mark.parametrize('status,expected', [(200, True), (404, False)])
def test_repo_exists_maps_status(status: int, expected: bool) -> None:
    """200 means present and 404 means absent."""
    session = MagicMock()
    session.get.return_value = _response(status)
    destination = _make_destination(session)

    assert destination.repo_exists('bob', 'repoB') is expected
    session.get.assert_called_once_with(
        'https://gitea.example.com/api/v1/repos/bob/repoB', timeout=5.0
    )


def test_repo_exists_unexpected_status_is_error() -> None:
    """Any other status must not be read as "absent"."""
    session = MagicMock()
    session.get.return_value = _response(500)
    destination = _make_destination(session)

    with pytest.raises(ProbeError) as excinfo:
        destination.repo_exists('bob', 'repoB')
    assert excinfo.value.status_code == 500


def test_repo_exists_transport_failure_is_probe_error() -> None:
    """Network failures surface as ProbeError, a TransportError."""
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError('refused')
    destination = _make_destination(session)

    with pytest.raises(TransportError) as excinfo:
        destination.repo_exists('bob', 'repoB')
    assert isinstance(excinfo.value, ProbeError)


def test_migrate_sends_mirror_policy() -> None:
    """The migration request creates a private mirror with full import."""
    session = MagicMock()
    session.post.return_value = _response(201, {'id': 1})
    destination = _make_destination(session)

    destination.migrate(_make_repo())

    session.post.assert_called_once()
    assert session.post.call_args.args[0] == 'https://gitea.example.com/api/v1/repos/migrate'
    body = session.post.call_args.kwargs['json']
    assert body['clone_addr'] == 'https://github.com/alice/repoA.git'
    assert body['auth_username'] == 'alice'
    assert body['auth_password'] == 'ghp_secret'
    assert body['repo_owner'] == 'alice'
    assert body['repo_name'] == 'repoA'
    assert body['mirror'] is True
    assert body['private'] is True
    for option in ('issues', 'labels', 'milestones', 'releases', 'wiki', 'pull_requests'):
        assert body[option] is True


def test_migrate_conflict_is_already_exists() -> None:
    """409 is a benign conflict rather than a migration failure."""
    session = MagicMock()
    session.post.return_value = _response(409, {'message': 'exists'})
    destination = _make_destination(session)

    with pytest.raises(AlreadyExistsError):
        destination.migrate(_make_repo())


def test_migrate_error_uses_destination_message() -> None:
    """The error text is exactly the message Gitea returned."""
    session = MagicMock()
    session.post.return_value = _response(422, {'message': 'name taken'})
    destination = _make_destination(session)

    with pytest.raises(MigrationError) as excinfo:
        destination.migrate(_make_repo())
    assert str(excinfo.value) == 'name taken'
    assert excinfo.value.status_code == 422


@pytest.mark.parametrize('body', [{}, {'errors': ['x']}, ['message'], None])
def test_migrate_error_without_message_is_unknown(body: Any) -> None:
    """Missing, malformed or non-JSON bodies give a generic error."""
    session = MagicMock()
    session.post.return_value = _response(500, body)
    destination = _make_destination(session)

    with pytest.raises(MigrationError) as excinfo:
        destination.migrate(_make_repo())
    assert str(excinfo.value) == 'unknown error'


def test_migrate_transport_failure() -> None:
    """Network failures during migration are transport errors."""
    session = MagicMock()
    session.post.side_effect = requests.Timeout('slow')
    destination = _make_destination(session)

    with pytest.raises(TransportError):
        destination.migrate(_make_repo())


def test_mirror_sync_posts_to_sync_endpoint() -> None:
    """A 200 from mirror-sync means the pull was accepted."""
    session = MagicMock()
    session.post.return_value = _response(200)
    destination = _make_destination(session)

    destination.mirror_sync('bob', 'repoB')

    session.post.assert_called_once_with(
        'https://gitea.example.com/api/v1/repos/bob/repoB/mirror-sync', timeout=5.0
    )


def test_mirror_sync_refused_is_sync_error() -> None:
    """Non-2xx answers are reported instead of silently ignored."""
    session = MagicMock()
    session.post.return_value = _response(403)
    destination = _make_destination(session)

    with pytest.raises(SyncError) as excinfo:
        destination.mirror_sync('bob', 'repoB')
    assert excinfo.value.status_code == 403


def test_mirror_sync_transport_failure() -> None:
    """Network failures during sync are transport errors."""
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError('down')
    destination = _make_destination(session)

    with pytest.raises(TransportError):
        destination.mirror_sync('bob', 'repoB')
