"""External service integrations."""

from .github import SubmissionClient
