"""Tests for the SQLite user store."""

import pytest

from repo_onboarding.infrastructure.user_store import DEFAULT_NAME, SQLiteUserStore


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "users.db")


@pytest.mark.asyncio
async def test_creates_user_with_defaults(db_path):
    store = SQLiteUserStore(db_path)
    user, created = await store.upsert("123")
    await store.close()

    assert created is True
    assert user.github_id == "123"
    assert user.name == DEFAULT_NAME
    assert user.email == "123@github.com"
    assert user.image == ""


@pytest.mark.asyncio
async def test_second_upsert_updates(db_path):
    store = SQLiteUserStore(db_path)
    await store.upsert("123", name="Ada", email="ada@example.com", image="a.png")
    user, created = await store.upsert("123", name="Ada L.")
    await store.close()

    assert created is False
    assert user.name == "Ada L."
    assert user.email == "ada@example.com"
    assert user.image == "a.png"


@pytest.mark.asyncio
async def test_persists_across_instances(db_path):
    first = SQLiteUserStore(db_path)
    await first.upsert("7", name="Grace")
    await first.close()

    second = SQLiteUserStore(db_path)
    user, created = await second.upsert("7")
    await second.close()

    assert created is False
    assert user.name == "Grace"


@pytest.mark.asyncio
async def test_unopenable_database_raises_and_retries(tmp_path):
    store = SQLiteUserStore(str(tmp_path / "missing" / "users.db"))
    with pytest.raises(Exception):
        await store.upsert("1")
    assert store._conn.peek() is None
