"""
Shared fixtures: a fresh repository and app per test.
"""

import pytest
from fastapi.testclient import TestClient

from auth.jwt import TokenService
from config.settings import Settings
from database.repository import UserRepository
from main import create_app

# Lowest bcrypt work factor, for speed.
FAST_ROUNDS = 4
TEST_SECRET = "test-secret"


@pytest.fixture
def repo() -> UserRepository:
    return UserRepository(bcrypt_rounds=FAST_ROUNDS)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def client(repo, tokens) -> TestClient:
    settings = Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=FAST_ROUNDS)
    app = create_app(settings, repository=repo, token_service=tokens)
    return TestClient(app)
