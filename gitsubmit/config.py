"""Submission client configuration parameters."""

from os import environ
import warnings

LOGLEVEL = int(environ.get('LOGLEVEL', '20'))
"""
Logging verbosity.

See `https://docs.python.org/3/library/logging.html#levels`_.
"""

# --- GITHUB API INTEGRATION ---

GITHUB_API_BASE = environ.get('GITHUB_API_BASE',
                              'https://github.gatech.edu/api/v3/')
"""
Root of the REST API, including the trailing slash.

Request paths (e.g. ``repos/{user}/{repo}``) are appended to this value.
"""

GITHUB_VERIFY = bool(int(environ.get('GITHUB_VERIFY', '1')))
"""Enable/disable TLS certificate verification for the API."""

if not GITHUB_VERIFY:
    warnings.warn('Certificate verification for the GitHub API is disabled;'
                  ' this should not be disabled in production.')

GITHUB_TIMEOUT = environ.get('GITHUB_TIMEOUT')
"""
Seconds to wait for the API to respond.

If not set, no timeout is applied and the defaults of the HTTP stack are used.
"""

DOWNLOAD_CHUNK_SIZE = int(environ.get('DOWNLOAD_CHUNK_SIZE', '1024'))
"""Number of bytes copied at a time when saving a zipball to disk."""

# --- SESSION CREDENTIALS ---
#
# These are only used by :func:`gitsubmit.services.github.get_session`;
# callers that construct a client directly can ignore them.

GITHUB_USER = environ.get('GITHUB_USER')
"""Owner of the submission repository."""

GITHUB_REPO = environ.get('GITHUB_REPO')
"""Name of the submission repository."""

GITHUB_CREDENTIAL = environ.get('GITHUB_CREDENTIAL')
"""Base64-encoded ``username:password`` for HTTP basic auth."""

GITHUB_OTP = environ.get('GITHUB_OTP')
"""One-time password for accounts with two-factor authentication."""
