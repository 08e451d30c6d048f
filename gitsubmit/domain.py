"""Data structures for submission repositories and HTTP exchanges."""

import base64
from typing import Any, Optional, Mapping, Union, Generic, TypeVar

from dataclasses import dataclass, field
from typing_extensions import Literal

__all__ = ('Method', 'METHODS', 'Credential', 'SubmissionTarget', 'Ok',
           'Err', 'BodyResult', 'Exchange', 'FileContents')

Method = Literal['GET', 'POST', 'PUT', 'DELETE']
METHODS = ('GET', 'POST', 'PUT', 'DELETE')

T = TypeVar('T')


@dataclass(frozen=True)
class Credential:
    """Basic-auth credential, plus an optional one-time password."""

    base64_auth: str
    """Base64-encoded ``username:password``."""

    otp_code: Optional[str] = field(default=None)
    """Two-factor code, sent in the ``X-GitHub-OTP`` header."""

    @classmethod
    def from_password(cls, username: str, password: str,
                      otp_code: Optional[str] = None) -> 'Credential':
        """Encode a username and password for HTTP basic auth."""
        raw = f'{username}:{password}'.encode('utf-8')
        return cls(base64.b64encode(raw).decode('ascii'), otp_code)

    @property
    def headers(self) -> Mapping[str, str]:
        """Extra headers that must accompany every request."""
        if self.otp_code is None:
            return {}
        return {'X-GitHub-OTP': self.otp_code}

    def __repr__(self) -> str:
        """Keep the secret out of logs and tracebacks."""
        otp = None if self.otp_code is None else '***'
        return f'Credential(base64_auth=***, otp_code={otp})'


@dataclass(frozen=True)
class SubmissionTarget:
    """The remote repository that holds a student's submission."""

    user: str
    """Owner of the repository."""

    repo: str
    """Name of the repository."""

    @property
    def path(self) -> str:
        """API path of the repository resource."""
        return f'repos/{self.user}/{self.repo}'


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A response body that was read successfully."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """A response body that could not be read."""

    cause: Exception

    @property
    def ok(self) -> bool:
        return False


BodyResult = Union[Ok[str], Err]


@dataclass
class Exchange:
    """
    The outcome of a single HTTP request.

    Only ``status_code`` is always reliable. ``body`` and ``headers`` are
    ``None`` unless they were asked for.
    """

    status_code: int
    body: Optional[BodyResult] = field(default=None)
    headers: Optional[Mapping[str, str]] = field(default=None)


@dataclass
class FileContents:
    """A file in a repository, as described by the contents endpoint."""

    path: str = field(default_factory=str)
    name: str = field(default_factory=str)
    sha: Optional[str] = field(default=None)
    """Blob sha; required by the API to update an existing file."""

    @classmethod
    def from_json(cls, data: Any) -> 'FileContents':
        """Build from decoded response data, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise TypeError(f'Expected a JSON object, got {type(data)}')
        return cls(path=data.get('path', ''), name=data.get('name', ''),
                   sha=data.get('sha'))
