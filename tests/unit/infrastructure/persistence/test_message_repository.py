"""Unit tests for MessageRepository."""

from datetime import datetime, timedelta

import pytest

from mailbridge.infrastructure.persistence.models import UserModel
from mailbridge.infrastructure.persistence.repositories import MessageRepository


async def _user(db_session, username: str) -> UserModel:
    user = UserModel(username=username, password_hash="h" * 64)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.mark.asyncio
async def test_list_newest_first_with_paging(db_session, make_message):
    alice = await _user(db_session, "alice")
    base = datetime(2024, 1, 1, 12, 0, 0)
    for i in range(5):
        await make_message(alice, subject=f"m{i}", received_at=base + timedelta(minutes=i))

    repo = MessageRepository(db_session)
    first = await repo.list_for_user(alice.id, limit=2, offset=0)
    last = await repo.list_for_user(alice.id, limit=2, offset=4)

    assert [m.subject for m in first.messages] == ["m4", "m3"]
    assert first.count == 5
    assert first.has_more is True
    assert [m.subject for m in last.messages] == ["m0"]
    assert last.has_more is False


@pytest.mark.asyncio
async def test_list_only_own_messages(db_session, make_message):
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    await make_message(alice)
    await make_message(bob)

    page = await MessageRepository(db_session).list_for_user(alice.id)

    assert page.count == 1
    assert all(m.user_id == alice.id for m in page.messages)


@pytest.mark.asyncio
async def test_prefix_filter(db_session, make_message):
    alice = await _user(db_session, "alice")
    await make_message(alice, to_address="alice@mailbridge.test")
    await make_message(alice, to_address="news.alice@mailbridge.test")
    await make_message(alice, to_address="newsletter.alice@mailbridge.test")

    page = await MessageRepository(db_session).list_for_user(alice.id, prefix="news")

    assert page.count == 1
    assert page.messages[0].to_address == "news.alice@mailbridge.test"


@pytest.mark.asyncio
async def test_get_for_user_checks_owner(db_session, make_message):
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    message = await make_message(alice)

    repo = MessageRepository(db_session)

    assert (await repo.get_for_user(message.id, alice.id)).id == message.id
    assert await repo.get_for_user(message.id, bob.id) is None
    assert await repo.get_for_user(9999, alice.id) is None


@pytest.mark.asyncio
async def test_mark_as_read(db_session, make_message):
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    message = await make_message(alice)
    repo = MessageRepository(db_session)

    assert await repo.mark_as_read(message.id, bob.id) is False
    assert await repo.mark_as_read(message.id, alice.id) is True

    await db_session.refresh(message)
    assert message.is_read is True


@pytest.mark.asyncio
async def test_delete_for_user(db_session, make_message):
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    message = await make_message(alice)
    repo = MessageRepository(db_session)

    assert await repo.delete_for_user(message.id, bob.id) is False
    assert await repo.delete_for_user(message.id, alice.id) is True
    assert await repo.get_for_user(message.id, alice.id) is None
