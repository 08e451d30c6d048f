"""
Client for managing student submission repositories on GitHub Enterprise.

A submission is a private repository owned by the student. Files are pushed
to it as commits, course staff are added as collaborators, and snapshots are
downloaded as zipballs for grading.

.. code-block:: python

   from gitsubmit import SubmissionClient, Credential

   credential = Credential.from_password('alice', 's3cret')
   client = SubmissionClient('alice', credential.base64_auth, 'hw1')
   client.create_repo()
   client.push_file('hw1/Solution.java', 'Submitting homework 1')
   client.add_collab('ta-bob')

Watch out for :class:`.exceptions.TwoFactorAuthRequired` when checking a
credential with :func:`.services.github.test_auth`, and for
:class:`.exceptions.NotFound` and :class:`.exceptions.DownloadFailed` when
downloading.
"""

from .domain import Credential, SubmissionTarget, Exchange, FileContents, \
    Ok, Err
from .exceptions import ServiceDown, TwoFactorAuthRequired, NotFound, \
    DownloadFailed, MalformedResponse, ConfigurationError
from .services.github import SubmissionClient
