from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from albums import repository, schemas
from main import create_app


class InMemoryAlbumStore:
    """Keeps albums in a dict; behaves like the postgres store for routes."""

    def __init__(self) -> None:
        self.albums: dict[str, repository.NewAlbum] = {}
        self.closed = False

    async def insert_album(self, album: repository.NewAlbum) -> str:
        if album.album_id in self.albums:
            raise repository.StoreError(f"duplicate album id {album.album_id}")
        self.albums[album.album_id] = album
        return album.album_id

    async def get_album(self, album_id: str) -> schemas.Profile | None:
        album = self.albums.get(album_id)
        return None if album is None else album.profile

    async def close(self) -> None:
        self.closed = True


class FailingAlbumStore:
    async def insert_album(self, album: repository.NewAlbum) -> str:
        raise repository.StoreError("connection reset by peer at 10.0.0.5:5432")

    async def get_album(self, album_id: str) -> schemas.Profile | None:
        raise repository.StoreError("connection reset by peer at 10.0.0.5:5432")

    async def close(self) -> None:
        return None


class FakePool:
    """Records SQL sent through the asyncpg pool API the stores use."""

    def __init__(self, rows: dict[str, dict] | None = None, fail_with: Exception | None = None) -> None:
        self.rows = rows or {}
        self.fail_with = fail_with
        self.executed: list[tuple[str, tuple]] = []
        self.closed = False

    async def execute(self, sql: str, *args):
        if self.fail_with is not None:
            raise self.fail_with
        self.executed.append((" ".join(sql.split()), args))
        return "OK"

    async def fetchrow(self, sql: str, *args):
        if self.fail_with is not None:
            raise self.fail_with
        self.executed.append((" ".join(sql.split()), args))
        return self.rows.get(args[0])

    async def fetchval(self, sql: str, *args):
        return 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def store() -> InMemoryAlbumStore:
    return InMemoryAlbumStore()


@pytest.fixture
def client(store: InMemoryAlbumStore) -> TestClient:
    return TestClient(create_app(store=store))


@pytest.fixture
def failing_client() -> TestClient:
    return TestClient(create_app(store=FailingAlbumStore()))


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "DATABASE_URL",
        "DB_DSN",
        "ALBUM_STORE",
        "ALBUMS_RESET_ON_STARTUP",
        "DB_POOL_MIN_SIZE",
        "DB_POOL_MAX_SIZE",
        "DB_COMMAND_TIMEOUT",
        "LOG_LEVEL",
        "HOST",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
