from datetime import timedelta

import pytest

from api import create_app
from models import DBStorage
from services import AuthContextResolver, AuthService, CredentialStore, TokenService
from utils.security import PasswordHasher

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    app.extensions["storage"].drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage():
    storage = DBStorage("sqlite://")
    storage.reload()
    yield storage
    storage.drop_all()


@pytest.fixture
def hasher():
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def make_tokens(storage):
    def _make(access_expires=timedelta(minutes=5), refresh_expires=timedelta(days=1)):
        return TokenService(
            storage,
            access_secret=ACCESS_SECRET,
            refresh_secret=REFRESH_SECRET,
            access_expires=access_expires,
            refresh_expires=refresh_expires,
        )
    return _make


@pytest.fixture
def tokens(make_tokens):
    return make_tokens()


@pytest.fixture
def credentials(storage):
    return CredentialStore(storage)


@pytest.fixture
def auth(credentials, hasher, tokens):
    return AuthService(credentials, hasher, tokens)


@pytest.fixture
def resolver(tokens):
    return AuthContextResolver(tokens)


@pytest.fixture
def register(client):
    def _register(username="alice", email="a@x.com", password="p1"):
        return client.post(
            "/api/v1/auth/registration",
            json={"username": username, "email": email, "password": password},
        )
    return _register


@pytest.fixture
def access_secret():
    return ACCESS_SECRET
