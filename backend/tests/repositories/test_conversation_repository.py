"""
Tests for ConversationRepository.

Covers participant ordering, membership queries and the document-style
message list and seen map.
"""

from datetime import datetime, timedelta, timezone

from chatline.models import Conversation
from chatline.repositories.conversation_repository import ConversationRepository


class TestConversationRepository:
    def test_create_with_participants_keeps_invite_order(self, db, alice, bob, carol):
        repo = ConversationRepository(db)

        conversation = repo.create_with_participants("trio", [carol.id, alice.id, bob.id])
        db.commit()

        db.expire_all()
        stored = db.get(Conversation, conversation.id)
        assert stored.participant_ids == [carol.id, alice.id, bob.id]
        assert [p.user.username for p in stored.participants] == ["carol", "alice", "bob"]

    def test_list_for_user_orders_by_last_activity(self, db, alice, bob, carol):
        repo = ConversationRepository(db)
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first = repo.create_with_participants("first", [alice.id, bob.id], created_at=start)
        second = repo.create_with_participants(
            "second", [alice.id, carol.id], created_at=start + timedelta(minutes=1)
        )
        repo.create_with_participants("others", [bob.id, carol.id], created_at=start)
        db.commit()

        assert [c.id for c in repo.list_for_user(alice.id)] == [second.id, first.id]

        repo.touch(first, start + timedelta(minutes=5))
        db.commit()

        assert [c.id for c in repo.list_for_user(alice.id)] == [first.id, second.id]
        assert sorted(repo.conversation_ids_for_user(alice.id)) == sorted([first.id, second.id])

    def test_append_message_persists_list(self, db, alice, bob):
        repo = ConversationRepository(db)
        conversation = repo.create_with_participants("pair", [alice.id, bob.id])
        at = datetime(2030, 1, 1, tzinfo=timezone.utc)

        repo.append_message(conversation, "01JE5000000000000000000001", at)
        repo.append_message(conversation, "01JE5000000000000000000002", at)
        db.commit()

        db.expire_all()
        stored = db.get(Conversation, conversation.id)
        assert stored.message_ids == ["01JE5000000000000000000001", "01JE5000000000000000000002"]
        assert stored.last_activity_at.replace(tzinfo=timezone.utc) == at

    def test_set_seen_overwrites_pointer(self, db, alice, bob):
        repo = ConversationRepository(db)
        conversation = repo.create_with_participants("pair", [alice.id, bob.id])

        repo.set_seen(conversation, bob.id, "01JE5000000000000000000001")
        repo.set_seen(conversation, bob.id, "01JE5000000000000000000002")
        repo.set_seen(conversation, alice.id, "01JE5000000000000000000001")
        db.commit()

        db.expire_all()
        assert db.get(Conversation, conversation.id).seen == {
            bob.id: "01JE5000000000000000000002",
            alice.id: "01JE5000000000000000000001",
        }

    def test_delete_removes_participant_rows(self, db, alice, bob):
        repo = ConversationRepository(db)
        conversation = repo.create_with_participants("pair", [alice.id, bob.id])
        db.commit()

        assert repo.delete(conversation.id) is True
        db.commit()

        assert repo.conversation_ids_for_user(alice.id) == []
