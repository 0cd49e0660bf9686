import pytest

from messenger.api.friends.models import Friendship
from messenger.api.friends.schemas import RelationStatus
from messenger.api.friends.service import FriendshipService
from messenger.core.errors import (
    AlreadyFriends, Blocked, Conflict, Forbidden, InvalidInput, InvalidTarget, NotFound, RequestPending
)


class TestSendRequest:

    def test_stores_canonical_pair(self, db, make_user):
        a, b = make_user(), make_user()
        FriendshipService(db).send_request(b.id, a.id)

        row = db.query(Friendship).one()
        assert (row.user_low_id, row.user_high_id) == (a.id, b.id)
        assert row.requested_by == b.id
        assert row.status == "pending"

    def test_rerequest_in_either_direction_conflicts(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(a.id, b.id)

        with pytest.raises(RequestPending):
            service.send_request(a.id, b.id)
        with pytest.raises(Conflict):
            service.send_request(b.id, a.id)
        assert db.query(Friendship).count() == 1

    def test_already_friends(self, db, make_user, befriend):
        a, b = make_user(), make_user()
        befriend(a, b)

        with pytest.raises(AlreadyFriends):
            FriendshipService(db).send_request(b.id, a.id)

    def test_self_and_missing_target(self, db, make_user):
        a = make_user()
        service = FriendshipService(db)

        with pytest.raises(InvalidTarget):
            service.send_request(a.id, a.id)
        with pytest.raises(InvalidTarget):
            service.send_request(a.id, 999)

    def test_lost_race_reports_winner_state(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(b.id, a.id)

        real_get_pair = service.get_pair
        calls = []

        def stale_get_pair(x, y):
            calls.append((x, y))
            # First lookup misses, as if the other insert had not committed yet
            return None if len(calls) == 1 else real_get_pair(x, y)

        service.get_pair = stale_get_pair

        with pytest.raises(RequestPending):
            service.send_request(a.id, b.id)
        assert len(calls) == 2
        assert db.query(Friendship).count() == 1


class TestRespond:

    def test_accept(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(a.id, b.id)

        service.respond(b.id, a.id, "accept")

        assert service.are_friends(a.id, b.id)
        assert service.are_friends(b.id, a.id)

    def test_reject_deletes_row(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(a.id, b.id)

        service.respond(b.id, a.id, "reject")

        assert db.query(Friendship).count() == 0
        assert service.status_of(a.id, b.id) == RelationStatus.NONE

    def test_requester_cannot_respond(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(a.id, b.id)

        with pytest.raises(Forbidden):
            service.respond(a.id, b.id, "accept")

    def test_nothing_pending(self, db, make_user):
        a, b = make_user(), make_user()
        with pytest.raises(NotFound):
            FriendshipService(db).respond(b.id, a.id, "accept")

    def test_unknown_action(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(a.id, b.id)

        with pytest.raises(InvalidInput):
            service.respond(b.id, a.id, "maybe")


class TestRelations:

    def test_status_from_both_sides(self, db, make_user):
        a, b = make_user(), make_user()
        service = FriendshipService(db)
        service.send_request(a.id, b.id)

        assert service.status_of(a.id, b.id) == RelationStatus.PENDING_SENT
        assert service.status_of(b.id, a.id) == RelationStatus.PENDING_RECEIVED
        assert service.status_of(a.id, a.id) == RelationStatus.SELF

    def test_lists(self, db, make_user, befriend):
        me = make_user("me")
        zed, amy, req = make_user("zed"), make_user("amy"), make_user("req")
        out = make_user("out")
        befriend(me, zed)
        befriend(amy, me)
        service = FriendshipService(db)
        service.send_request(req.id, me.id)
        service.send_request(me.id, out.id)

        assert [u.username for u in service.get_friends(me.id)] == ["amy", "zed"]
        assert [r.user.username for r in service.get_friend_requests(me.id)] == ["req"]
        assert [r.user.username for r in service.get_sent_requests(me.id)] == ["out"]

    def test_remove_friend(self, db, make_user, befriend):
        a, b = make_user(), make_user()
        befriend(a, b)
        service = FriendshipService(db)

        service.remove_friend(b.id, a.id)

        assert not service.are_friends(a.id, b.id)
        with pytest.raises(NotFound):
            service.remove_friend(a.id, b.id)

    def test_block_is_terminal(self, db, make_user, befriend):
        a, b = make_user(), make_user()
        befriend(a, b)
        service = FriendshipService(db)

        service.block(b.id, a.id)

        assert service.status_of(a.id, b.id) == RelationStatus.BLOCKED
        assert db.query(Friendship).count() == 1
        with pytest.raises(Blocked):
            service.send_request(a.id, b.id)
        with pytest.raises(NotFound):
            service.remove_friend(a.id, b.id)
