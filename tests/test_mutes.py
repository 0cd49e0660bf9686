import pytest

from messenger.api.conversations.service import ConversationService
from messenger.api.groups.service import GroupService
from messenger.api.mutes.models import Mute
from messenger.api.mutes.service import MuteService
from messenger.core.errors import InvalidInput, NotFound


class TestMutes:

    def test_conversation_mute_roundtrip(self, db, make_user, befriend):
        a, b = make_user(), make_user()
        befriend(a, b)
        conversation = ConversationService(db).resolve(a.id, b.id)
        service = MuteService(db)

        assert service.set_muted(a.id, "conversation", conversation.id, True)
        assert service.set_muted(a.id, "conversation", conversation.id, True)
        assert db.query(Mute).count() == 1

        [mine] = ConversationService(db).list_for(a.id)
        [theirs] = ConversationService(db).list_for(b.id)
        assert mine.is_muted
        assert not theirs.is_muted

        assert not service.set_muted(a.id, "conversation", conversation.id, False)
        assert not service.is_muted(a.id, "conversation", conversation.id)

    def test_group_mute(self, db, make_user, befriend):
        owner, pal = make_user(), make_user()
        befriend(owner, pal)
        group = GroupService(db).create_group(owner.id, "G", [pal.id])

        MuteService(db).set_muted(pal.id, "group", group.id, True)

        assert GroupService(db).get_details(group.id, pal.id).is_muted
        assert not GroupService(db).get_details(group.id, owner.id).is_muted
        assert MuteService(db).muted_ids(pal.id, "group") == {group.id}

    def test_requires_participation(self, db, make_user, befriend):
        a, b, c = make_user(), make_user(), make_user()
        befriend(a, b)
        conversation = ConversationService(db).resolve(a.id, b.id)
        service = MuteService(db)

        with pytest.raises(NotFound):
            service.set_muted(c.id, "conversation", conversation.id, True)
        with pytest.raises(NotFound):
            service.set_muted(c.id, "group", 42, True)
        with pytest.raises(InvalidInput):
            service.set_muted(a.id, "channel", conversation.id, True)
