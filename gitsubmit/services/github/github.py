"""
Provides integration with the GitHub Enterprise REST API.

This integration is focused on usage patterns required by the submission
workflow. Specifically:

1. Must be able to check a credential, including two-factor accounts.
2. Must be able to create a private submission repository, and push files to
   it as commits.
3. Must be able to grant and revoke access for collaborators (e.g. TAs).
4. Must be able to fork, delete, and download a snapshot of a repository.

Every operation is a single synchronous round trip (two for
:meth:`SubmissionClient.download`), and nothing is retried. HTTP-level
failures are generally returned as status codes for the caller to interpret.
"""

import base64
import json
import logging
import os
from datetime import datetime
from functools import wraps
from http import HTTPStatus as status
from typing import Optional, Mapping, Any
from urllib.parse import quote

import requests
from requests.structures import CaseInsensitiveDict
from pytz import UTC

from ...config import LOGLEVEL
from ...context import get_setting, get_application_global
from ...domain import Credential, SubmissionTarget, Exchange, FileContents, \
    Ok, Err, BodyResult, Method, METHODS
from ...exceptions import ServiceDown, TwoFactorAuthRequired, NotFound, \
    DownloadFailed, MalformedResponse, ConfigurationError

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)
logger.setLevel(LOGLEVEL)

OTP_HEADER = 'X-GitHub-OTP'
"""Header used to send, and to ask for, a one-time password."""


def _timeout() -> Optional[float]:
    timeout = get_setting('GITHUB_TIMEOUT')
    if timeout in (None, ''):
        return None
    return float(timeout)


def _verify() -> bool:
    verify = get_setting('GITHUB_VERIFY')
    if isinstance(verify, str):
        return bool(int(verify))
    return bool(verify)


def _timestamp() -> str:
    """Current time, in the form ``Mon Oct 19 03:41:00 UTC 2026``."""
    return datetime.now(UTC).strftime('%a %b %d %H:%M:%S %Z %Y')


def _read_body(response: requests.models.Response) -> BodyResult:
    """Read the whole response body, without raising on IO failure."""
    try:
        return Ok(response.text)
    except (requests.exceptions.RequestException, OSError) as e:
        logger.warning('Failed to read response body: %s', e)
        return Err(e)


def do_request(path: str, method: Method, credential: str, body: str = '',
               capture_body: bool = False,
               headers: Optional[Mapping[str, str]] = None,
               capture_headers: bool = False,
               base_url: Optional[str] = None,
               session: Optional[requests.Session] = None) -> Exchange:
    """
    Perform a single authenticated request against the API.

    Redirects are never followed; a 3xx response is returned as-is so that
    the caller can decide what to do with its ``Location``.

    Parameters
    ----------
    path : str
        Path relative to the API base, e.g. ``repos/alice/hw1``.
    method : str
        One of ``GET``, ``POST``, ``PUT``, ``DELETE``.
    credential : str
        Base64-encoded basic-auth credential.
    body : str
        JSON document to send. Ignored for ``GET``.
    capture_body : bool
        If ``True``, read the response body into :attr:`.Exchange.body`.
    headers : dict
        Extra request headers, e.g. ``X-GitHub-OTP``.
    capture_headers : bool
        If ``True``, keep the response headers in :attr:`.Exchange.headers`.
    base_url : str
        Root of the API. Defaults to the configured ``GITHUB_API_BASE``.
    session : :class:`requests.Session`
        Session to use. If not provided, a new one is used for this request
        only.

    Returns
    -------
    :class:`.Exchange`

    Raises
    ------
    :class:`ValueError`
        If ``method`` is not supported.
    :class:`.ServiceDown`
        If the API could not be reached at all.

    """
    if method not in METHODS:
        raise ValueError(f'Unsupported method: {method}')
    if base_url is None:
        base_url = get_setting('GITHUB_API_BASE')
    url = base_url + path

    request_headers = {'Authorization': f'Basic {credential}'}
    if headers:
        request_headers.update(headers)
    data: Optional[bytes] = None
    if method != 'GET':
        if body:
            data = body.encode('utf-8')
            request_headers['Content-Type'] = 'application/json'
        else:
            request_headers['Content-Length'] = '0'

    owns_session = session is None
    if session is None:
        session = requests.Session()
    logger.debug('%s %s', method, url)
    try:
        try:
            response = session.request(method, url, data=data,
                                       headers=request_headers,
                                       allow_redirects=False, stream=True,
                                       verify=_verify(),
                                       timeout=_timeout())
        except (requests.exceptions.ConnectionError,
                requests.exceptions.Timeout) as e:
            raise ServiceDown(f'Could not connect to {url}: {e}') from e
        try:
            logger.debug('%s %s: %i', method, url, response.status_code)
            exchange = Exchange(status_code=response.status_code)
            if capture_body:
                exchange.body = _read_body(response)
            if capture_headers:
                exchange.headers = CaseInsensitiveDict(response.headers)
        finally:
            response.close()
    finally:
        if owns_session:
            session.close()
    return exchange


def test_auth(credential: str, base_url: Optional[str] = None) -> bool:
    """
    Check whether a credential is accepted by the API.

    Returns
    -------
    bool
        ``False`` if the API responded ``401 Unauthorized``.

    Raises
    ------
    :class:`.TwoFactorAuthRequired`
        If the API asked for a one-time password, whatever the status code.

    """
    exchange = do_request('', 'GET', credential, capture_headers=True,
                          base_url=base_url)
    if exchange.headers is not None and OTP_HEADER in exchange.headers:
        raise TwoFactorAuthRequired('A one-time password is required')
    return exchange.status_code != status.UNAUTHORIZED


def test_two_factor_auth(credential: str, otp_code: str,
                         base_url: Optional[str] = None) -> bool:
    """Check whether a credential and one-time password are accepted."""
    exchange = do_request('', 'GET', credential,
                          headers={OTP_HEADER: otp_code}, base_url=base_url)
    return exchange.status_code != status.UNAUTHORIZED


class SubmissionClient(object):
    """An authenticated connection to a student's submission repository."""

    def __init__(self, user: str, credential: str, repo: str,
                 otp_code: Optional[str] = None,
                 base_url: Optional[str] = None) -> None:
        """Create a new HTTP session."""
        self._target = SubmissionTarget(user, repo)
        self._credential = Credential(credential, otp_code)
        if base_url is None:
            base_url = get_setting('GITHUB_API_BASE')
        self._base_url = base_url
        self._session = requests.Session()

    @property
    def user(self) -> str:
        """Owner of the submission repository."""
        return self._target.user

    @property
    def repo(self) -> str:
        """Name of the submission repository."""
        return self._target.repo

    @property
    def target(self) -> SubmissionTarget:
        """The repository this client acts on."""
        return self._target

    def _request(self, path: str, method: Method, body: str = '',
                 **kwargs: Any) -> Exchange:
        return do_request(path, method, self._credential.base64_auth, body,
                          headers=self._credential.headers,
                          base_url=self._base_url, session=self._session,
                          **kwargs)

    def _collaborator_path(self, name: str) -> str:
        return f'{self._target.path}/collaborators/{quote(name)}'

    def _contents_path(self, name: str) -> str:
        return f'{self._target.path}/contents/{quote(name)}'

    def create_repo(self) -> Optional[int]:
        """
        Create the submission repository as a private repo, if necessary.

        Returns
        -------
        int or None
            Status of the creation request, or ``None`` if the repository
            already existed. The outcome of the creation is not verified.

        """
        exchange = self._request(self._target.path, 'GET')
        if exchange.status_code != status.NOT_FOUND:
            return None
        payload = json.dumps({'name': self.repo, 'private': True})
        exchange = self._request('user/repos', 'POST', payload)
        logger.debug('Created %s: %i', self._target.path,
                     exchange.status_code)
        return exchange.status_code

    def download(self, file_name: str) -> str:
        """
        Download a zip snapshot of the repository.

        This is done in two steps: the API answers the zipball request with a
        redirect, and the archive is then fetched from the ``Location`` it
        gives. No credential is sent with the second request.

        Parameters
        ----------
        file_name : str
            Base name of the file to write; ``.zip`` is appended.

        Returns
        -------
        str
            Path of the file that was written.

        Raises
        ------
        :class:`.NotFound`
            If the repository does not exist. No file is written.
        :class:`.DownloadFailed`
            If the archive location is missing, or anything goes wrong while
            fetching or writing it.

        """
        exchange = self._request(f'{self._target.path}/zipball', 'GET',
                                 capture_headers=True)
        if exchange.status_code == status.NOT_FOUND:
            raise NotFound(f'404 Not Found: {self._target.path}')
        out_path = f'{file_name}.zip'
        try:
            location = exchange.headers['Location']     # type: ignore
            self._save(location, out_path)
        except (KeyError, TypeError, requests.exceptions.RequestException,
                OSError) as e:
            logger.error('Download of %s failed: %s', self._target.path, e)
            raise DownloadFailed('Encountered error while downloading'
                                 f" {self.user}'s submission") from e
        return out_path

    def _save(self, location: str, out_path: str) -> None:
        """Stream the content at ``location`` into ``out_path``."""
        chunk_size = int(get_setting('DOWNLOAD_CHUNK_SIZE'))
        # The location carries a short-lived token; keep it out of the logs.
        logger.debug('Fetching archive for %s', self._target.path)
        response = self._session.get(location, stream=True,
                                     verify=_verify(),
                                     timeout=_timeout())
        try:
            response.raise_for_status()
            with open(out_path, 'wb') as f:
                try:
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        f.write(chunk)
                except (requests.exceptions.RequestException, OSError):
                    f.close()
                    os.remove(out_path)
                    raise
        finally:
            response.close()

    def fork(self, org: Optional[str] = None) -> int:
        """
        Fork the repository using this client's credential.

        The credential need not belong to the repository owner, so e.g. a TA
        can fork a student's submission into a course organization.

        Parameters
        ----------
        org : str
            If given, fork into this organization rather than the account
            that owns the credential.

        Returns
        -------
        int
            The status code, unmodified.

        """
        path = f'{self._target.path}/forks'
        if org is not None:
            path = f'{path}?organization={quote(org)}'
        return self._request(path, 'POST').status_code

    def delete(self) -> int:
        """Delete the repository, and return the status code."""
        return self._request(self._target.path, 'DELETE').status_code

    def add_collab(self, name: str) -> bool:
        """
        Add someone (a TA, for example) as a collaborator.

        Returns
        -------
        bool
            Whether or not the operation succeeded.

        """
        exchange = self._request(self._collaborator_path(name), 'PUT')
        return exchange.status_code == status.NO_CONTENT

    def remove_collab(self, name: str) -> bool:
        """Remove a collaborator; ``True`` if the operation succeeded."""
        exchange = self._request(self._collaborator_path(name), 'DELETE')
        return exchange.status_code == status.NO_CONTENT

    def _existing_sha(self, exchange: Exchange) -> str:
        """Get the blob sha from a contents response."""
        if not isinstance(exchange.body, Ok):
            cause = exchange.body.cause if isinstance(exchange.body, Err) \
                else None
            raise MalformedResponse('Could not read contents response') \
                from cause
        try:
            contents = FileContents.from_json(json.loads(exchange.body.value))
        except (json.decoder.JSONDecodeError, TypeError) as e:
            raise MalformedResponse(f'Failed to parse contents: {e}') from e
        if contents.sha is None:
            raise MalformedResponse('Contents response has no sha')
        return contents.sha

    def push_file(self, path: str, message: str) -> bool:
        """
        Submit a file to the submission repository as a commit.

        The file is stored at the root of the repository, under its base
        name. If a file by that name already exists it is replaced.

        Parameters
        ----------
        path : str
            Local path of the file to submit.
        message : str
            The commit message. The current time is prepended to it.

        Returns
        -------
        bool
            ``True`` if the file was created or updated.

        Raises
        ------
        :class:`.MalformedResponse`
            If the existing file's sha could not be determined.

        """
        name = os.path.basename(path)
        contents_path = self._contents_path(name)
        sha = ''
        exchange = self._request(contents_path, 'GET', capture_body=True)
        if exchange.status_code != status.NOT_FOUND:
            sha = self._existing_sha(exchange)

        with open(path, 'rb') as f:
            content = base64.b64encode(f.read()).decode('ascii')
        payload = json.dumps({
            'path': name,
            'message': f'{_timestamp()} {message}',
            'content': content,
            'sha': sha
        })
        exchange = self._request(contents_path, 'PUT', payload)
        logger.debug('Pushed %s to %s: %i', name, self._target.path,
                     exchange.status_code)
        return exchange.status_code in (status.OK, status.CREATED)


def init_app(app: Optional[Any] = None) -> None:
    """
    Set required configuration defaults for the application.

    Parameters
    ----------
    app : :class:`flask.Flask`

    """
    if app is not None:
        app.config.setdefault('GITHUB_API_BASE',
                              get_setting('GITHUB_API_BASE'))
        app.config.setdefault('GITHUB_VERIFY', get_setting('GITHUB_VERIFY'))
        app.config.setdefault('GITHUB_TIMEOUT', get_setting('GITHUB_TIMEOUT'))
        app.config.setdefault('DOWNLOAD_CHUNK_SIZE',
                              get_setting('DOWNLOAD_CHUNK_SIZE'))


def get_session(app: Optional[Any] = None) -> SubmissionClient:
    """
    Create a new :class:`.SubmissionClient` from the configuration.

    Parameters
    ----------
    app : :class:`flask.Flask`

    Returns
    -------
    :class:`.SubmissionClient`

    Raises
    ------
    :class:`.ConfigurationError`
        If the user, credential or repository is not configured.

    """
    user = get_setting('GITHUB_USER', app)
    credential = get_setting('GITHUB_CREDENTIAL', app)
    repo = get_setting('GITHUB_REPO', app)
    if not (user and credential and repo):
        raise ConfigurationError('GITHUB_USER, GITHUB_CREDENTIAL and'
                                 ' GITHUB_REPO must be set')
    return SubmissionClient(user, credential, repo,
                            otp_code=get_setting('GITHUB_OTP', app),
                            base_url=get_setting('GITHUB_API_BASE', app))


def current_session() -> SubmissionClient:
    """Get the :class:`.SubmissionClient` for this context."""
    g = get_application_global()
    if g:
        if 'github' not in g:
            g.github = get_session()    # type: ignore
        return g.github     # type: ignore
    return get_session()


@wraps(SubmissionClient.create_repo)
def create_repo() -> Optional[int]:
    """Create the submission repository, if necessary."""
    return current_session().create_repo()


@wraps(SubmissionClient.download)
def download(file_name: str) -> str:
    """Download a zip snapshot of the submission repository."""
    return current_session().download(file_name)


@wraps(SubmissionClient.fork)
def fork(org: Optional[str] = None) -> int:
    """Fork the submission repository."""
    return current_session().fork(org)


@wraps(SubmissionClient.delete)
def delete() -> int:
    """Delete the submission repository."""
    return current_session().delete()


@wraps(SubmissionClient.add_collab)
def add_collab(name: str) -> bool:
    """Add a collaborator to the submission repository."""
    return current_session().add_collab(name)


@wraps(SubmissionClient.remove_collab)
def remove_collab(name: str) -> bool:
    """Remove a collaborator from the submission repository."""
    return current_session().remove_collab(name)


@wraps(SubmissionClient.push_file)
def push_file(path: str, message: str) -> bool:
    """Submit a file to the submission repository."""
    return current_session().push_file(path, message)
