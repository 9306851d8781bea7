"""Shared test configuration, pytest markers and fake providers."""

import pytest

from config import Settings
from services.providers import ModerationVerdict, TextResponse


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: calls real providers or loads real ML models (slow)"
    )


class FakeTextProvider:
    """Scripted TextProvider.

    Each call pops the next item from ``script``: an exception instance is
    raised, a string is returned as the response text. The last item is
    reused once the script runs out.
    """

    def __init__(self, *script, input_tokens: int = 1200, output_tokens: int = 400):
        self.script = list(script) or [""]
        self.calls = 0
        self.prompts: list[tuple[str, str]] = []
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens

    async def generate(self, system_prompt, user_prompt, options):
        self.calls += 1
        self.prompts.append((system_prompt, user_prompt))
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return TextResponse(
            text=item,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            model="fake-model",
        )


class FakeEmbeddingProvider:
    """Embeds text as keyword-count vectors over a fixed vocabulary."""

    def __init__(self, vocabulary=None, error: Exception | None = None):
        self.vocabulary = vocabulary or ["python", "docker", "react", "sql", "kubernetes", "aws"]
        self.error = error
        self.calls = 0

    async def embed(self, texts):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [[float(t.lower().count(word)) for word in self.vocabulary] for t in texts]


class FakeModerationProvider:
    def __init__(self, flagged_categories=None, error: Exception | None = None):
        self.flagged_categories = flagged_categories or []
        self.error = error
        self.calls = 0

    async def classify(self, text):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ModerationVerdict(
            flagged=bool(self.flagged_categories),
            categories={c: True for c in self.flagged_categories},
        )


SAMPLE_RESUME = """Jane Doe
jane.doe@example.com | (555) 123-4567 | linkedin.com/in/janedoe
Austin, TX

Summary
Backend engineer with 6 years of experience building scalable Python services and REST APIs for fintech products.

Experience
Senior Software Engineer, Acme Corp
Jan 2020 - Present
- Led migration of 12 services to Kubernetes on AWS
- Improved API performance by 40% through caching and query optimization
- Built CI/CD pipelines with Docker and GitHub Actions

Software Engineer, Initech
Jun 2017 - Dec 2019
- Developed REST APIs in Python and Django used by 200 customers
- Implemented automated testing with pytest

Education
B.S. Computer Science, University of Texas, 2017

Skills
Python, Django, Docker, Kubernetes, AWS, PostgreSQL, Redis, Git

Achievements
- Speaker at PyCon 2022
"""

SAMPLE_JOB_DESCRIPTION = """We are hiring a Senior Backend Engineer to design and build scalable
Python services. Requirements: Python, Docker, Kubernetes, AWS, PostgreSQL, GraphQL and
experience with CI/CD. Experience with React is a plus."""


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="",
        cover_letter_retry_delay_seconds=0,
        cover_letter_timeout_seconds=5,
        analysis_timeout_seconds=5,
        embedding_timeout_seconds=5,
        moderation_timeout_seconds=5,
        _env_file=None,
    )
