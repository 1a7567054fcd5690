"""Tests for the credential and session stores."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UniquenessViolation
from app.core.roles import Role
from app.models.session import SessionRecord
from app.schemas.user import CredentialRecord, NewCredential, Principal
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore, new_session_id


def _candidate(username="alice", email="a@x.com", role=Role.SALES) -> NewCredential:
    return NewCredential(username=username, email=email, role=role, password_hash="digest.salt")


# ── Credential store ────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_user_returns_principal(db_session: AsyncSession):
    created = await CredentialStore(db_session).create_user(_candidate())
    assert isinstance(created, Principal)
    assert created.id is not None
    assert created.role is Role.SALES
    assert created.created_at is not None
    assert "password_hash" not in created.model_dump()


@pytest.mark.asyncio
async def test_lookups_by_email_and_username_carry_hash(db_session: AsyncSession):
    store = CredentialStore(db_session)
    await store.create_user(_candidate())

    by_email = await store.get_by_email("a@x.com")
    by_username = await store.get_by_username("alice")
    assert isinstance(by_email, CredentialRecord)
    assert by_email.password_hash == "digest.salt"
    assert by_username.id == by_email.id
    assert "digest.salt" not in repr(by_email)


@pytest.mark.asyncio
async def test_lookup_by_id_has_no_hash(db_session: AsyncSession):
    store = CredentialStore(db_session)
    created = await store.create_user(_candidate())
    found = await store.get_by_id(created.id)
    assert isinstance(found, Principal)
    assert not hasattr(found, "password_hash")


@pytest.mark.asyncio
async def test_missing_lookups_return_none(db_session: AsyncSession):
    store = CredentialStore(db_session)
    assert await store.get_by_email("nobody@x.com") is None
    assert await store.get_by_username("nobody") is None
    assert await store.get_by_id(999) is None


@pytest.mark.asyncio
async def test_duplicate_email_raises_uniqueness_violation(db_session: AsyncSession):
    store = CredentialStore(db_session)
    await store.create_user(_candidate())
    with pytest.raises(UniquenessViolation) as info:
        await store.create_user(_candidate(username="alice2"))
    assert info.value.field == "email"


@pytest.mark.asyncio
async def test_duplicate_username_raises_uniqueness_violation(db_session: AsyncSession):
    store = CredentialStore(db_session)
    await store.create_user(_candidate())
    with pytest.raises(UniquenessViolation) as info:
        await store.create_user(_candidate(email="other@x.com"))
    assert info.value.field == "username"


@pytest.mark.asyncio
async def test_list_by_dealer_and_delete(db_session: AsyncSession):
    store = CredentialStore(db_session)
    mine = await store.create_user(
        NewCredential(username="s1", email="s1@x.com", role=Role.SALES, dealer_id=7, password_hash="d.s")
    )
    await store.create_user(
        NewCredential(username="s2", email="s2@x.com", role=Role.SALES, dealer_id=8, password_hash="d.s")
    )

    staff = await store.list_by_dealer(7, Role.SALES)
    assert [p.id for p in staff] == [mine.id]

    assert await store.delete_user(mine.id) is True
    assert await store.get_by_id(mine.id) is None
    assert await store.delete_user(mine.id) is False


# ── Session store ───────────────────────────────────────────────────
def _in(days: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest.mark.asyncio
async def test_session_put_get_delete(db_session: AsyncSession):
    store = SessionStore(db_session)
    sid = new_session_id()
    await store.put(sid, 42, _in(30))
    assert await store.get(sid) == 42

    await store.delete(sid)
    assert await store.get(sid) is None
    # Deleting again is harmless
    await store.delete(sid)


@pytest.mark.asyncio
async def test_unknown_session_is_absent(db_session: AsyncSession):
    assert await SessionStore(db_session).get("no-such-session") is None


@pytest.mark.asyncio
async def test_expired_session_reads_as_absent(db_session: AsyncSession):
    store = SessionStore(db_session)
    await store.put("stale", 1, _in(-1))
    await store.put("fresh", 2, _in(1))
    assert await store.get("stale") is None
    assert await store.get("fresh") == 2

    assert await store.prune_expired() == 1
    assert await store.get("fresh") == 2


@pytest.mark.asyncio
async def test_put_overwrites_existing_session(db_session: AsyncSession):
    store = SessionStore(db_session)
    await store.put("sid", 1, _in(1))
    await store.put("sid", 2, _in(1))
    assert await store.get("sid") == 2


@pytest.mark.asyncio
async def test_session_table_created_on_first_use(db_session: AsyncSession):
    """The store must provision its own table when the schema lacks it."""
    await db_session.run_sync(
        lambda s: SessionRecord.__table__.drop(s.connection(), checkfirst=True)
    )
    await db_session.commit()

    store = SessionStore(db_session)
    await store.put("sid", 5, _in(1))
    assert await store.get("sid") == 5


@pytest.mark.asyncio
async def test_session_survives_new_store_instance(session_factory):
    """A new session (as after a restart) still sees persisted rows."""
    async with session_factory() as first:
        await SessionStore(first).put("durable", 9, _in(1))
    async with session_factory() as second:
        assert await SessionStore(second).get("durable") == 9


def test_session_ids_are_unique_and_long():
    ids = {new_session_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) >= 40 for i in ids)
