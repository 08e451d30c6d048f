"""
Integration with the GitHub Enterprise REST API.

Each student's submission lives in a private repository on the course's
GitHub Enterprise instance. :class:`.SubmissionClient` wraps the handful of
endpoints needed to manage those repositories on behalf of a student or TA.

Unlike a general-purpose GitHub client, this module contains no real
business-logic: the objective is simply to provide a user-friendly calling
API.
"""

from .github import SubmissionClient, do_request, test_auth, \
    test_two_factor_auth, init_app, get_session, current_session
