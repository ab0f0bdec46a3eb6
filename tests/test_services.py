from datetime import datetime, timedelta, timezone

import pytest

from anon_inbox import constants
from anon_inbox.clients.database import Message as MessageORM, User as UserORM, session_scope
from anon_inbox.errors import (
    Forbidden,
    InvalidContent,
    InvalidPurpose,
    InvalidUsername,
    MessageNotFound,
    StoreUnavailable,
    UserNotFound,
    UsernameTaken,
)
from anon_inbox.models.enums import MessagePurpose
from anon_inbox.models.message import Message
from anon_inbox.services.filtering import count_by_purpose, filter_messages


def _owner_message_count(owner_id: str) -> int:
    with session_scope() as db:
        return db.query(MessageORM).filter(MessageORM.owner_id == owner_id).count()


def test_register_defaults_to_accepting(user_service, acceptance_service):
    user = user_service.register("carol_1")

    assert user.accepting_messages is True
    assert acceptance_service.get_acceptance(user.id) is True

    with session_scope() as db:
        stored = db.get(UserORM, user.id)
        assert stored.username == "carol_1"


def test_register_rejects_duplicate_and_invalid_usernames(user_service, alice):
    with pytest.raises(UsernameTaken):
        user_service.register("alice")
    with pytest.raises(InvalidUsername):
        user_service.register("a")
    with pytest.raises(InvalidUsername):
        user_service.register("bad name!")

    assert user_service.is_username_available("alice") is False
    assert user_service.is_username_available("dave") is True


def test_set_acceptance_is_idempotent(acceptance_service, alice):
    assert acceptance_service.set_acceptance(alice.id, True) is True
    assert acceptance_service.set_acceptance(alice.id, True) is True
    assert acceptance_service.get_acceptance(alice.id) is True

    assert acceptance_service.set_acceptance(alice.id, False) is False
    assert acceptance_service.get_acceptance(alice.id) is False


def test_acceptance_unknown_user(acceptance_service):
    with pytest.raises(UserNotFound):
        acceptance_service.get_acceptance("missing")
    with pytest.raises(UserNotFound):
        acceptance_service.set_acceptance("missing", True)


def test_submit_to_accepting_user_stores_one_message(inbox_service, alice):
    result = inbox_service.submit("alice", "Great job!", "appreciation")

    assert result.accepted is True
    assert result.message_id

    messages = inbox_service.list_messages(alice.id, alice.id)
    assert len(messages) == 1
    assert messages[0].id == result.message_id
    assert messages[0].content == "Great job!"
    assert messages[0].purpose == MessagePurpose.APPRECIATION
    assert messages[0].owner_id == alice.id


def test_submit_to_non_accepting_user_creates_nothing(inbox_service, acceptance_service, alice):
    inbox_service.submit("alice", "before the switch", "feedback")
    acceptance_service.set_acceptance(alice.id, False)
    before = _owner_message_count(alice.id)

    result = inbox_service.submit("alice", "Hello?", "suggestion")

    assert result.accepted is False
    assert result.message_id is None
    assert _owner_message_count(alice.id) == before
    # Switching off keeps what was already received.
    assert [m.content for m in inbox_service.list_messages(alice.id, alice.id)] == ["before the switch"]


def test_submit_validation(inbox_service, alice):
    with pytest.raises(InvalidContent):
        inbox_service.submit("alice", "   ", "feedback")
    with pytest.raises(InvalidContent):
        inbox_service.submit("alice", "x" * (constants.MAX_CONTENT_LENGTH + 1), "feedback")
    with pytest.raises(InvalidPurpose):
        inbox_service.submit("alice", "hello", "complaint")
    with pytest.raises(UserNotFound):
        inbox_service.submit("nobody", "hello", "feedback")
    with pytest.raises(InvalidContent):
        inbox_service.submit("alice", None, "feedback")
    with pytest.raises(InvalidPurpose):
        inbox_service.submit("alice", "hello", None)

    assert _owner_message_count(alice.id) == 0


def test_submit_accepts_content_at_length_limit(inbox_service, alice):
    at_limit = "y" * constants.MAX_CONTENT_LENGTH

    result = inbox_service.submit("alice", at_limit, "feedback")

    assert result.accepted is True
    assert inbox_service.list_messages(alice.id, alice.id)[0].content == at_limit
    with pytest.raises(InvalidContent):
        inbox_service.submit("alice", at_limit + "y", "feedback")


def test_submit_stores_content_exactly_as_sent(inbox_service, alice):
    raw = "  Great job!\n"

    inbox_service.submit("alice", raw, "appreciation")

    assert inbox_service.list_messages(alice.id, alice.id)[0].content == raw


def test_submit_purpose_must_match_exactly(inbox_service, alice):
    for purpose in (" FEEDBACK ", "Feedback", "suggestion "):
        with pytest.raises(InvalidPurpose):
            inbox_service.submit("alice", "hello", purpose)

    assert _owner_message_count(alice.id) == 0


def test_listed_messages_carry_utc_offset(inbox_service, message_store, alice):
    sent_at = datetime(2026, 3, 1, 12, 30, tzinfo=timezone(timedelta(hours=2)))
    message_store.append(
        Message(
            id="tz1",
            owner_id=alice.id,
            content="from another zone",
            purpose=MessagePurpose.SUGGESTION,
            created_at=sent_at,
        )
    )

    listed = inbox_service.list_messages(alice.id, alice.id)[0]

    assert listed.created_at.tzinfo is not None
    assert listed.created_at.utcoffset() == timedelta(0)
    assert listed.created_at == sent_at
    assert message_store.get("tz1").created_at.tzinfo is not None


def test_list_messages_newest_first_and_stable(inbox_service, message_store, alice):
    now = datetime.now(timezone.utc)
    for offset, content in enumerate(["oldest", "middle", "newest"]):
        message_store.append(
            Message(
                id=f"m{offset}",
                owner_id=alice.id,
                content=content,
                purpose=MessagePurpose.FEEDBACK,
                created_at=now + timedelta(seconds=offset),
            )
        )

    first = inbox_service.list_messages(alice.id, alice.id)
    second = inbox_service.list_messages(alice.id, alice.id)

    assert [m.content for m in first] == ["newest", "middle", "oldest"]
    assert [m.id for m in first] == [m.id for m in second]


def test_list_messages_requires_owner(inbox_service, alice, bob):
    with pytest.raises(Forbidden):
        inbox_service.list_messages(bob.id, alice.id)


def test_delete_message_then_redelete(inbox_service, alice):
    result = inbox_service.submit("alice", "Delete me", "feedback")

    inbox_service.delete_message(alice.id, result.message_id)

    assert result.message_id not in {m.id for m in inbox_service.list_messages(alice.id, alice.id)}
    with pytest.raises(MessageNotFound):
        inbox_service.delete_message(alice.id, result.message_id)


def test_delete_message_of_other_owner_is_forbidden(inbox_service, alice, bob):
    result = inbox_service.submit("alice", "Only for alice", "suggestion")

    with pytest.raises(Forbidden):
        inbox_service.delete_message(bob.id, result.message_id)

    assert len(inbox_service.list_messages(alice.id, alice.id)) == 1


def test_delete_unknown_message(inbox_service, alice):
    with pytest.raises(MessageNotFound):
        inbox_service.delete_message(alice.id, "does-not-exist")


def test_store_failure_surfaces_as_store_unavailable(message_store, alice):
    message = Message(
        id="dup",
        owner_id=alice.id,
        content="first",
        purpose=MessagePurpose.FEEDBACK,
        created_at=datetime.now(timezone.utc),
    )
    message_store.append(message)

    with pytest.raises(StoreUnavailable):
        message_store.append(message.model_copy(update={"content": "second"}))

    assert [m.content for m in message_store.list_by_owner(alice.id)] == ["first"]


def test_filter_is_pure_projection(inbox_service, alice):
    inbox_service.submit("alice", "needs work", "feedback")
    inbox_service.submit("alice", "try dark mode", "suggestion")
    inbox_service.submit("alice", "love it", "appreciation")
    inbox_service.submit("alice", "more tests", "feedback")
    fetched = inbox_service.list_messages(alice.id, alice.id)

    feedback_first = filter_messages(fetched, "feedback")
    everything = filter_messages(fetched, "all")
    feedback_again = filter_messages(fetched, "feedback")

    assert feedback_first == feedback_again
    assert {m.content for m in feedback_first} == {"needs work", "more tests"}
    assert everything == fetched
    assert count_by_purpose(fetched) == {
        "all": 4,
        "feedback": 2,
        "suggestion": 1,
        "appreciation": 1,
    }

    with pytest.raises(InvalidPurpose):
        filter_messages(fetched, "spam")
