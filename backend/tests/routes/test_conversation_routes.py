# tests/routes/test_conversation_routes.py
"""
Conversation routes tests.

- POST /conversations - Create conversation
- GET /conversations - List conversations
- DELETE /conversations/{id} - Delete conversation
- POST /conversations/see/{id} - Mark a message as seen
- POST /conversations/{id} - Send a message
"""

from chatline.models.conversation import Conversation
from chatline.models.message import Message
from chatline.services.conversation_service import ConversationService

MISSING_ID = "01JE5000000000000000000000"


class TestCreateConversation:
    """Tests for POST /conversations."""

    def test_create_conversation(self, client, db, alice, bob, alice_headers):
        res = client.post(
            "/conversations", json={"participant_ids": [bob.id]}, headers=alice_headers
        )
        assert res.status_code == 200
        data = res.json()
        assert data["participant_ids"] == [alice.id, bob.id]
        assert data["title"]

        conversation = db.get(Conversation, data["id"])
        assert conversation is not None
        assert conversation.participant_ids == [alice.id, bob.id]
        assert conversation.message_ids == []
        assert conversation.seen == {}

    def test_duplicates_are_removed_in_invite_order(
        self, client, alice, bob, carol, alice_headers
    ):
        res = client.post(
            "/conversations",
            json={"participant_ids": [carol.id, alice.id, bob.id, carol.id]},
            headers=alice_headers,
        )
        assert res.status_code == 200
        assert res.json()["participant_ids"] == [alice.id, carol.id, bob.id]

    def test_custom_title(self, client, bob, alice_headers):
        res = client.post(
            "/conversations",
            json={"participant_ids": [bob.id], "title": "Weekend plans"},
            headers=alice_headers,
        )
        assert res.json()["title"] == "Weekend plans"

    def test_malformed_participant_id(self, client, alice_headers):
        res = client.post(
            "/conversations", json={"participant_ids": ["not-an-id"]}, headers=alice_headers
        )
        assert res.status_code == 400

    def test_unknown_participant(self, client, db, alice_headers):
        res = client.post(
            "/conversations", json={"participant_ids": [MISSING_ID]}, headers=alice_headers
        )
        assert res.status_code == 400
        assert db.query(Conversation).count() == 0

    def test_empty_participant_list(self, client, alice_headers):
        res = client.post("/conversations", json={"participant_ids": []}, headers=alice_headers)
        assert res.status_code == 400

    def test_requires_auth(self, client, bob):
        res = client.post("/conversations", json={"participant_ids": [bob.id]})
        assert res.status_code == 401


class TestListConversations:
    """Tests for GET /conversations."""

    def test_list_empty(self, client, alice_headers):
        res = client.get("/conversations", headers=alice_headers)
        assert res.status_code == 200
        assert res.json()["conversations"] == []

    def test_list_resolves_participants_and_messages(
        self, client, alice, bob, conversation, message, bob_headers
    ):
        res = client.get("/conversations", headers=bob_headers)
        assert res.status_code == 200
        [item] = res.json()["conversations"]
        assert item["id"] == conversation.id
        assert [p["username"] for p in item["participants"]] == ["alice", "bob"]
        assert [m["id"] for m in item["messages"]] == [message.id]
        assert item["messages"][0]["content"] == "hello bob"

    def test_list_only_includes_own_conversations(
        self, client, conversation, carol_headers
    ):
        res = client.get("/conversations", headers=carol_headers)
        assert res.json()["conversations"] == []

    def test_list_orders_by_last_activity(self, client, db, alice, bob, carol, alice_headers):
        service = ConversationService(db)
        older = service.create_conversation(alice, [bob.id])
        newer = service.create_conversation(alice, [carol.id])

        res = client.get("/conversations", headers=alice_headers)
        assert [c["id"] for c in res.json()["conversations"]] == [newer.id, older.id]

        service.send_message(alice, older.id, "bump")
        res = client.get("/conversations", headers=alice_headers)
        assert [c["id"] for c in res.json()["conversations"]] == [older.id, newer.id]

    def test_deleted_messages_hide_content(self, client, db, alice, message, alice_headers):
        client.delete(f"/messages/{message.id}", headers=alice_headers)
        res = client.get("/conversations", headers=alice_headers)
        [listed] = res.json()["conversations"][0]["messages"]
        assert listed["is_deleted"] is True
        assert listed["content"] is None


class TestDeleteConversation:
    """Tests for DELETE /conversations/{conversation_id}."""

    def test_participant_can_delete(self, client, db, conversation, message, bob_headers):
        res = client.delete(f"/conversations/{conversation.id}", headers=bob_headers)
        assert res.status_code == 200
        assert res.json() == {"id": conversation.id, "deleted": True}
        assert db.get(Conversation, conversation.id) is None
        # Messages survive the conversation
        assert db.get(Message, message.id) is not None

    def test_non_participant_cannot_delete(self, client, db, conversation, carol_headers):
        res = client.delete(f"/conversations/{conversation.id}", headers=carol_headers)
        assert res.status_code == 401
        assert db.get(Conversation, conversation.id) is not None

    def test_malformed_id(self, client, alice_headers):
        res = client.delete("/conversations/nope", headers=alice_headers)
        assert res.status_code == 400

    def test_missing_conversation(self, client, alice_headers):
        res = client.delete(f"/conversations/{MISSING_ID}", headers=alice_headers)
        assert res.status_code == 404


class TestSendMessage:
    """Tests for POST /conversations/{conversation_id}."""

    def test_send_message(self, client, db, alice, conversation, alice_headers):
        res = client.post(
            f"/conversations/{conversation.id}", json={"content": "hi"}, headers=alice_headers
        )
        assert res.status_code == 200
        data = res.json()
        assert data["conversation_id"] == conversation.id

        stored = db.get(Message, data["id"])
        assert stored.content == "hi"
        assert stored.author_id == alice.id
        assert stored.is_edited is False
        assert stored.is_deleted is False
        assert stored.reactions == {}
        assert db.get(Conversation, conversation.id).message_ids == [data["id"]]

    def test_reply_to_message_in_same_conversation(
        self, client, db, conversation, message, bob_headers
    ):
        res = client.post(
            f"/conversations/{conversation.id}",
            json={"content": "hi back", "reply_to_id": message.id},
            headers=bob_headers,
        )
        assert res.status_code == 200
        assert db.get(Message, res.json()["id"]).reply_to_id == message.id

    def test_reply_to_message_of_other_conversation(
        self, client, db, alice, carol, conversation, alice_headers
    ):
        service = ConversationService(db)
        other = service.create_conversation(alice, [carol.id])
        foreign = service.send_message(alice, other.id, "elsewhere")

        res = client.post(
            f"/conversations/{conversation.id}",
            json={"content": "hi", "reply_to_id": foreign.id},
            headers=alice_headers,
        )
        assert res.status_code == 400

    def test_reply_to_malformed_id(self, client, conversation, alice_headers):
        res = client.post(
            f"/conversations/{conversation.id}",
            json={"content": "hi", "reply_to_id": "bad"},
            headers=alice_headers,
        )
        assert res.status_code == 400

    def test_non_participant_cannot_post(self, client, db, conversation, carol_headers):
        res = client.post(
            f"/conversations/{conversation.id}", json={"content": "hi"}, headers=carol_headers
        )
        assert res.status_code == 401
        assert db.query(Message).count() == 0

    def test_blank_content_is_rejected(self, client, conversation, alice_headers):
        res = client.post(
            f"/conversations/{conversation.id}", json={"content": "   "}, headers=alice_headers
        )
        assert res.status_code == 400

    def test_missing_conversation(self, client, alice_headers):
        res = client.post(f"/conversations/{MISSING_ID}", json={"content": "hi"}, headers=alice_headers)
        assert res.status_code == 404


class TestMarkSeen:
    """Tests for POST /conversations/see/{conversation_id}."""

    def test_mark_seen(self, client, db, bob, conversation, message, bob_headers):
        res = client.post(
            f"/conversations/see/{conversation.id}",
            json={"message_id": message.id},
            headers=bob_headers,
        )
        assert res.status_code == 200
        assert res.json()["seen"] == {bob.id: message.id}
        assert db.get(Conversation, conversation.id).seen == {bob.id: message.id}

    def test_latest_write_wins(self, client, db, alice, bob, conversation, message, bob_headers):
        second = ConversationService(db).send_message(alice, conversation.id, "again")
        for target in (second.id, message.id):
            client.post(
                f"/conversations/see/{conversation.id}",
                json={"message_id": target},
                headers=bob_headers,
            )
        assert db.get(Conversation, conversation.id).seen == {bob.id: message.id}

    def test_non_participant_is_rejected_first(self, client, db, conversation, message, carol_headers):
        res = client.post(
            f"/conversations/see/{conversation.id}",
            json={"message_id": message.id},
            headers=carol_headers,
        )
        assert res.status_code == 401
        assert db.get(Conversation, conversation.id).seen == {}

    def test_missing_message_is_a_validation_error(self, client, conversation, bob_headers):
        res = client.post(
            f"/conversations/see/{conversation.id}",
            json={"message_id": MISSING_ID},
            headers=bob_headers,
        )
        assert res.status_code == 400

    def test_malformed_message_id(self, client, conversation, bob_headers):
        res = client.post(
            f"/conversations/see/{conversation.id}",
            json={"message_id": "nope"},
            headers=bob_headers,
        )
        assert res.status_code == 400

    def test_missing_conversation(self, client, message, bob_headers):
        res = client.post(
            f"/conversations/see/{MISSING_ID}",
            json={"message_id": message.id},
            headers=bob_headers,
        )
        assert res.status_code == 404
