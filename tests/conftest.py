"""Shared fixtures for the test suite."""

import pytest

from marvel_graphrag.config import Config
from marvel_graphrag.llm import LLMError


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def llm_down():
    return LLMError("LLM generation failed: connection refused")
