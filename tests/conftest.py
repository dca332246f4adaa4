"""Shared fixtures: settings and a run context with every service mocked out."""
from unittest.mock import MagicMock
import pytest
from docmigrator.core.config import Settings
from docmigrator.core.context import RunContext
from docmigrator.core.slugs import SlugResolver


def make_settings(**overrides) -> Settings:
    values = dict(
        _env_file=None,
        github_token="gh-token",
        github_repository="cppdoc-cc/cppdoc",
        openrouter_api_key="or-key",
        format_command=None,
        retry_attempts=3,
        retry_delay=0.0,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def slugs():
    return SlugResolver({
        "cpp/comments": "cpp/comments",
        "cpp/language/main_function": "cpp/language/main_function",
        "cpp/keyword/goto": None,
    })


@pytest.fixture
def ctx(tmp_path, slugs):
    return RunContext(
        settings=make_settings(corpus_dir=str(tmp_path)),
        slugs=slugs,
        github=MagicMock(),
        llm=MagicMock(),
        images=None,
        sleep=MagicMock(),
    )


@pytest.fixture
def settings_factory():
    return make_settings
