# tests/routes/test_realtime_routes.py
"""
Realtime WebSocket tests.

Every connection first receives a ``connected`` handshake; tests wait for it
before acting so that the session is fully bound and subscribed.
"""

from chatline.services.conversation_service import ConversationService


def _token(headers):
    return headers["Authorization"].split(" ", 1)[1]


def _connect(client, headers):
    return client.websocket_connect(f"/ws?token={_token(headers)}")


class TestHandshake:
    def test_identified_connection(self, client, hub, alice, conversation, alice_headers):
        with _connect(client, alice_headers) as ws:
            event = ws.receive_json()
            assert event["type"] == "connected"
            assert event["schema_version"] == 1
            payload = event["payload"]
            assert payload["user_id"] == alice.id
            assert payload["conversation_ids"] == [conversation.id]
            assert hub.session_for_user(alice.id) == payload["session_id"]
            assert payload["session_id"] in hub.room_members(conversation.id)

    def test_authorization_header_is_accepted(self, client, alice, alice_headers):
        with client.websocket_connect("/ws", headers=alice_headers) as ws:
            assert ws.receive_json()["payload"]["user_id"] == alice.id

    def test_unidentified_connection_stays_inert(self, client, hub):
        with client.websocket_connect("/ws?token=garbage") as ws:
            event = ws.receive_json()
            assert event["type"] == "connected"
            assert event["payload"]["user_id"] is None
            assert hub.online_user_ids() == []
            assert hub.get_stats()["sessions"] == 1


class TestPresence:
    def test_online_and_offline_are_broadcast(self, client, alice, bob, alice_headers, bob_headers):
        with _connect(client, bob_headers) as bob_ws:
            bob_ws.receive_json()  # connected

            with _connect(client, alice_headers) as alice_ws:
                alice_ws.receive_json()  # connected
                online = bob_ws.receive_json()
                assert online["type"] == "user-online"
                assert online["payload"] == {"user_id": alice.id, "username": "alice"}

            offline = bob_ws.receive_json()
            assert offline["type"] == "user-offline"
            assert offline["payload"]["user_id"] == alice.id


class TestFanOut:
    def test_message_created_reaches_room(
        self, client, alice, bob, conversation, alice_headers, bob_headers
    ):
        with _connect(client, bob_headers) as bob_ws:
            bob_ws.receive_json()  # connected

            res = client.post(
                f"/conversations/{conversation.id}", json={"content": "hi"}, headers=alice_headers
            )
            event = bob_ws.receive_json()
            assert event["type"] == "message-created"
            assert event["payload"]["conversation_id"] == conversation.id
            assert event["payload"]["message"]["id"] == res.json()["id"]
            assert event["payload"]["message"]["content"] == "hi"

    def test_message_mutations_reach_room(
        self, client, bob, conversation, message, alice_headers, bob_headers
    ):
        with _connect(client, bob_headers) as bob_ws:
            bob_ws.receive_json()  # connected

            client.put(f"/messages/{message.id}", json={"content": "edited"}, headers=alice_headers)
            edited = bob_ws.receive_json()
            assert edited["type"] == "message-edited"
            assert edited["payload"]["content"] == "edited"

            client.post(f"/messages/{message.id}", json={"reaction": "LOVE"}, headers=bob_headers)
            reaction = bob_ws.receive_json()
            assert reaction["type"] == "message-reaction-changed"
            assert reaction["payload"]["reactions"] == {bob.id: "LOVE"}

            client.post(
                f"/conversations/see/{conversation.id}",
                json={"message_id": message.id},
                headers=bob_headers,
            )
            seen = bob_ws.receive_json()
            assert seen["type"] == "conversation-seen-updated"
            assert seen["payload"]["seen"] == {bob.id: message.id}

            client.delete(f"/messages/{message.id}", headers=alice_headers)
            deleted = bob_ws.receive_json()
            assert deleted["type"] == "message-deleted"
            assert deleted["payload"]["message_id"] == message.id

    def test_session_header_excludes_sender(
        self, client, alice, bob, conversation, alice_headers, bob_headers
    ):
        with _connect(client, alice_headers) as alice_ws:
            alice_session = alice_ws.receive_json()["payload"]["session_id"]

            with _connect(client, bob_headers) as bob_ws:
                bob_ws.receive_json()  # connected
                alice_ws.receive_json()  # user-online for bob

                client.post(
                    f"/conversations/{conversation.id}",
                    json={"content": "from alice"},
                    headers={**alice_headers, "X-Session-Id": alice_session},
                )
                assert bob_ws.receive_json()["payload"]["message"]["content"] == "from alice"

                client.post(
                    f"/conversations/{conversation.id}",
                    json={"content": "from bob"},
                    headers=bob_headers,
                )
                # alice skipped her own message, so bob's is the next thing she sees
                event = alice_ws.receive_json()
                assert event["type"] == "message-created"
                assert event["payload"]["message"]["content"] == "from bob"

    def test_new_conversation_joins_online_participants(
        self, client, hub, alice, bob, alice_headers, bob_headers
    ):
        with _connect(client, bob_headers) as bob_ws:
            bob_session = bob_ws.receive_json()["payload"]["session_id"]

            res = client.post(
                "/conversations", json={"participant_ids": [bob.id]}, headers=alice_headers
            )
            conversation_id = res.json()["id"]
            created = bob_ws.receive_json()
            assert created["type"] == "conversation-created"
            assert created["payload"]["conversation"]["id"] == conversation_id
            assert created["payload"]["conversation"]["participant_ids"] == [alice.id, bob.id]
            assert bob_session in hub.room_members(conversation_id)

            client.post(
                f"/conversations/{conversation_id}", json={"content": "welcome"}, headers=alice_headers
            )
            assert bob_ws.receive_json()["type"] == "message-created"

    def test_deleted_conversation_room_is_closed(
        self, client, db, hub, alice, conversation, alice_headers, bob_headers
    ):
        with _connect(client, bob_headers) as bob_ws:
            bob_ws.receive_json()  # connected

            client.delete(f"/conversations/{conversation.id}", headers=alice_headers)
            event = bob_ws.receive_json()
            assert event["type"] == "conversation-deleted"
            assert event["payload"] == {
                "conversation_id": conversation.id,
                "deleted_by": alice.id,
            }
            assert hub.room_members(conversation.id) == set()

    def test_offline_participant_joins_on_connect(self, client, db, alice, bob, bob_headers):
        conversation = ConversationService(db).create_conversation(alice, [bob.id])
        with _connect(client, bob_headers) as bob_ws:
            payload = bob_ws.receive_json()["payload"]
            assert payload["conversation_ids"] == [conversation.id]

    def test_editing_deleted_message_does_not_leak_content(
        self, client, message, alice_headers, bob_headers
    ):
        with _connect(client, bob_headers) as bob_ws:
            bob_ws.receive_json()  # connected

            client.delete(f"/messages/{message.id}", headers=alice_headers)
            assert bob_ws.receive_json()["type"] == "message-deleted"

            res = client.put(
                f"/messages/{message.id}", json={"content": "hidden edit"}, headers=alice_headers
            )
            assert res.status_code == 200
            edited = bob_ws.receive_json()
            assert edited["type"] == "message-edited"
            assert edited["payload"]["content"] is None
