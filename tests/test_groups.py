from datetime import datetime, timedelta

import pytest

from messenger.api.groups.models import Group, GroupMember, GroupMessage
from messenger.api.groups.service import GroupService
from messenger.api.messages import lifecycle
from messenger.core.errors import (
    AlreadyMember, EditWindowExpired, Forbidden, InvalidInput, InvalidReply, InvalidState, MembersMustBeFriends,
    NotFound
)

T0 = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def trio(make_user, befriend):
    owner, ann, ben = make_user("owner"), make_user("ann"), make_user("ben")
    befriend(owner, ann)
    befriend(owner, ben)
    return owner, ann, ben


@pytest.fixture
def group(db, trio):
    owner, ann, ben = trio
    return GroupService(db, clock=lambda: T0).create_group(owner.id, "Book club", [ann.id, ben.id])


class TestCreate:

    def test_creator_is_admin(self, group, trio):
        owner, ann, ben = trio

        assert group.user_role == "admin"
        assert group.member_count == 3
        roles = {m.user.id: m.role for m in group.members}
        assert roles == {owner.id: "admin", ann.id: "member", ben.id: "member"}

    def test_non_friend_leaves_nothing_behind(self, db, make_user, befriend):
        creator, friend, stranger = make_user(), make_user(), make_user()
        befriend(creator, friend)

        with pytest.raises(MembersMustBeFriends):
            GroupService(db).create_group(creator.id, "Nope", [friend.id, stranger.id])

        assert db.query(Group).count() == 0
        assert db.query(GroupMember).count() == 0

    def test_needs_name_and_other_members(self, db, trio):
        owner, ann, _ = trio
        service = GroupService(db)

        with pytest.raises(InvalidInput):
            service.create_group(owner.id, "  ", [ann.id])
        with pytest.raises(InvalidInput):
            service.create_group(owner.id, "Solo", [owner.id])

    def test_duplicate_ids_collapse(self, db, trio):
        owner, ann, _ = trio
        details = GroupService(db).create_group(owner.id, "Pair", [ann.id, ann.id, owner.id])
        assert details.member_count == 2


class TestMembership:

    def test_add_member_rules(self, db, group, trio, make_user, befriend):
        owner, ann, ben = trio
        carl = make_user("carl")
        service = GroupService(db)

        with pytest.raises(MembersMustBeFriends):
            service.add_member(owner.id, group.id, carl.id)

        befriend(ann, carl)
        service.add_member(ann.id, group.id, carl.id)
        assert service.is_member(group.id, carl.id)

        with pytest.raises(AlreadyMember):
            service.add_member(owner.id, group.id, ann.id)
        with pytest.raises(NotFound):
            service.add_member(owner.id, 999, ann.id)

    def test_outsider_cannot_add(self, db, group, make_user, befriend):
        outsider, pal = make_user(), make_user()
        befriend(outsider, pal)
        with pytest.raises(Forbidden):
            GroupService(db).add_member(outsider.id, group.id, pal.id)

    def test_remove_member_rules(self, db, group, trio):
        owner, ann, ben = trio
        service = GroupService(db)

        with pytest.raises(Forbidden):
            service.remove_member(ann.id, group.id, ben.id)
        with pytest.raises(Forbidden):
            service.remove_member(owner.id, group.id, owner.id)

        service.remove_member(owner.id, group.id, ben.id)
        assert not service.is_member(group.id, ben.id)
        with pytest.raises(NotFound):
            service.remove_member(owner.id, group.id, ben.id)

    def test_leave(self, db, group, trio):
        _, ann, _ = trio
        service = GroupService(db)

        service.leave(ann.id, group.id)

        with pytest.raises(NotFound):
            service.leave(ann.id, group.id)
        with pytest.raises(NotFound):
            service.get_details(group.id, ann.id)

    def test_details_hide_existence_from_outsiders(self, db, group, make_user):
        outsider = make_user()
        service = GroupService(db)

        with pytest.raises(NotFound) as missing:
            service.get_details(999, outsider.id)
        with pytest.raises(NotFound) as hidden:
            service.get_details(group.id, outsider.id)
        assert missing.value.message == hidden.value.message

    def test_list_for(self, db, group, trio):
        owner, ann, _ = trio
        service = GroupService(db)
        service.send_message(ann.id, group.id, "hello all")

        [item] = service.list_for(owner.id)
        assert item.id == group.id
        assert item.member_count == 3
        assert item.last_message.content == "hello all"
        assert not item.is_muted


class TestGroupMessages:

    def test_members_only(self, db, group, make_user):
        outsider = make_user()
        service = GroupService(db)

        with pytest.raises(Forbidden):
            service.send_message(outsider.id, group.id, "hi")
        with pytest.raises(Forbidden):
            service.list_messages(outsider.id, group.id)

    def test_send_touches_group(self, db, group, trio):
        owner, _, _ = trio
        later = T0 + timedelta(minutes=5)

        GroupService(db, clock=lambda: later).send_message(owner.id, group.id, "agenda")

        assert db.get(Group, group.id).updated_at == later

    def test_reply_must_be_in_same_group(self, db, group, trio):
        owner, ann, ben = trio
        service = GroupService(db)
        other = service.create_group(owner.id, "Other", [ann.id])
        foreign = service.send_message(owner.id, other.id, "elsewhere")

        with pytest.raises(InvalidReply):
            service.send_message(ben.id, group.id, "re", reply_to_message_id=foreign.id)

    def test_lifecycle_rules_apply(self, db, group, trio):
        owner, ann, _ = trio
        sent = GroupService(db, clock=lambda: T0).send_message(owner.id, group.id, "draft")
        inside = GroupService(db, clock=lambda: T0 + timedelta(minutes=10))
        outside = GroupService(db, clock=lambda: T0 + timedelta(minutes=20))

        assert inside.edit_message(owner.id, group.id, sent.id, "final").content == "final"
        with pytest.raises(Forbidden):
            inside.edit_message(ann.id, group.id, sent.id, "mine")
        with pytest.raises(EditWindowExpired):
            outside.edit_message(owner.id, group.id, sent.id, "too late")

        deleted = inside.delete_message(owner.id, group.id, sent.id, True)
        assert deleted.content == lifecycle.DELETED_PLACEHOLDER

    def test_status_advanced_by_other_members(self, db, group, trio):
        owner, ann, _ = trio
        service = GroupService(db)
        sent = service.send_message(owner.id, group.id, "hi")

        assert service.advance_status(owner.id, group.id, [sent.id], "read") == 0
        assert service.advance_status(ann.id, group.id, [sent.id], "read") == 1
        assert db.get(GroupMessage, sent.id).status == "read"

    def test_listing_order_and_visibility(self, db, group, trio):
        owner, ann, _ = trio
        service = GroupService(db)
        first = service.send_message(owner.id, group.id, "first")
        second = service.send_message(ann.id, group.id, "second")
        service.delete_message(ann.id, group.id, second.id, False)

        assert [m.id for m in service.list_messages(owner.id, group.id)] == [first.id, second.id]
        assert [m.id for m in service.list_messages(ann.id, group.id)] == [first.id]

    def test_stale_member_cannot_downgrade_status(self, db, other_db, group, trio):
        owner, ann, ben = trio
        sent = GroupService(db).send_message(owner.id, group.id, "hi")
        assert other_db.get(GroupMessage, sent.id).status == "sent"

        assert GroupService(db).advance_status(ann.id, group.id, [sent.id], "read") == 1
        assert GroupService(other_db).advance_status(ben.id, group.id, [sent.id], "delivered") == 0

        db.expire_all()
        assert db.get(GroupMessage, sent.id).status == "read"

    def test_edit_after_delete_for_everyone_is_rejected(self, db, other_db, group, trio):
        owner, _, _ = trio
        sent = GroupService(db, clock=lambda: T0).send_message(owner.id, group.id, "draft")
        other_db.get(GroupMessage, sent.id)

        GroupService(db, clock=lambda: T0 + timedelta(minutes=1)).delete_message(owner.id, group.id, sent.id, True)
        with pytest.raises(InvalidState):
            GroupService(other_db, clock=lambda: T0 + timedelta(minutes=2)).edit_message(
                owner.id, group.id, sent.id, "draft again"
            )

        db.expire_all()
        assert db.get(GroupMessage, sent.id).content == lifecycle.DELETED_PLACEHOLDER

    def test_reply_preview_respects_visibility(self, db, group, trio):
        owner, ann, _ = trio
        service = GroupService(db)
        original = service.send_message(owner.id, group.id, "original")
        service.send_message(ann.id, group.id, "re", reply_to_message_id=original.id)

        service.delete_message(owner.id, group.id, original.id, False)

        [reply] = service.list_messages(owner.id, group.id)
        assert reply.reply_to_message is None
        assert service.list_messages(ann.id, group.id)[-1].reply_to_message.content == "original"
