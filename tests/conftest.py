"""Shared fixtures for inclusify tests."""

from __future__ import annotations

import io

import pytest

from config import ALWAYS_EXCLUDED, Config
from fake_forge import OWNER, REPO, FakeForge
from logging_utils import Logger


@pytest.fixture
def logger() -> Logger:
    """Logger writing into in-memory streams."""
    return Logger(stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture
def fake_forge() -> FakeForge:
    return FakeForge()


@pytest.fixture
def cfg() -> Config:
    return Config(
        command='createBranches',
        owner=OWNER,
        repo=REPO,
        token='token-value',
        base='master',
        target='main',
        exclusions=ALWAYS_EXCLUDED,
    )
