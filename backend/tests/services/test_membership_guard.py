# tests/services/test_membership_guard.py
import pytest

from chatline.core.exceptions import DomainException, ErrorKind
from chatline.services.membership_guard import MembershipGuard, resolve_user_id


class TestResolveUserId:
    def test_references_resolve_to_the_same_id(self, alice, conversation):
        participant = conversation.participants[0]

        assert resolve_user_id(alice.id) == alice.id
        assert resolve_user_id(alice) == alice.id
        assert resolve_user_id(participant) == alice.id

    def test_none(self):
        assert resolve_user_id(None) is None


class TestMembershipGuard:
    def test_participants(self, alice, bob, carol, conversation):
        assert MembershipGuard.is_participant(alice, conversation)
        assert MembershipGuard.is_participant(bob.id, conversation)
        assert not MembershipGuard.is_participant(carol, conversation)
        assert not MembershipGuard.is_participant(None, conversation)

    def test_author(self, alice, bob, message):
        assert MembershipGuard.is_author(alice, message)
        assert MembershipGuard.is_author(alice.id, message)
        assert not MembershipGuard.is_author(bob, message)

    def test_require_raises_authorization(self, carol, bob, conversation, message):
        with pytest.raises(DomainException) as participant_error:
            MembershipGuard.require_participant(carol, conversation)
        with pytest.raises(DomainException) as author_error:
            MembershipGuard.require_author(bob, message)

        assert participant_error.value.kind == ErrorKind.AUTHORIZATION
        assert author_error.value.kind == ErrorKind.AUTHORIZATION
        assert participant_error.value.status_code == 401
