"""Helpers for :mod:`gitsubmit.services.github` tests."""

from unittest import mock

BASE = 'https://github.example.edu/api/v3/'
SESSION = 'gitsubmit.services.github.github.requests.Session'


def response(status_code: int, text: str = '', headers: dict = None) \
        -> mock.MagicMock:
    """Make a fake :class:`requests.Response`."""
    return mock.MagicMock(status_code=status_code, text=text,
                          headers=headers if headers is not None else {})


def session_returning(mock_Session: mock.MagicMock, *responses) \
        -> mock.MagicMock:
    """Make the patched session answer requests with ``responses``."""
    mock_session = mock.MagicMock(
        request=mock.MagicMock(side_effect=list(responses))
    )
    mock_Session.return_value = mock_session
    return mock_session
