from datetime import datetime, timedelta

import pytest

from messenger.api.groups.service import GroupService
from messenger.api.messages.service import MessageService
from messenger.api.search.service import SearchService, score
from messenger.core.errors import InvalidInput

T0 = datetime(2026, 3, 1, 12, 0, 0)


def test_score_prefers_occurrences_then_whole_words():
    assert score("hello hello", "hello") > score("hello there", "hello")
    assert score("hello there", "hello") > score("othello", "hello")
    assert score("nothing", "hello") == 0


class TestSearch:

    @pytest.fixture
    def people(self, make_user, befriend):
        alice, bob, eve = make_user("alice"), make_user("bob"), make_user("eve")
        befriend(alice, bob)
        return alice, bob, eve

    def test_short_query_rejected(self, db, people):
        alice, _, _ = people
        with pytest.raises(InvalidInput):
            SearchService(db).search(alice.id, " a ")

    def test_ranking(self, db, people):
        alice, bob, _ = people
        MessageService(db, clock=lambda: T0).send_message(alice.id, bob.id, "othello tonight")
        MessageService(db, clock=lambda: T0 + timedelta(minutes=1)).send_message(bob.id, alice.id, "Hello!")
        MessageService(db, clock=lambda: T0 + timedelta(minutes=2)).send_message(alice.id, bob.id, "hello hello")
        MessageService(db, clock=lambda: T0 + timedelta(minutes=3)).send_message(bob.id, alice.id, "hello again")

        hits = SearchService(db).search(alice.id, "HELLO")

        assert [h.content for h in hits] == ["hello hello", "hello again", "Hello!", "othello tonight"]
        assert all(h.source == "direct" for h in hits)

    def test_scope_and_deleted(self, db, people, make_user):
        alice, bob, eve = people
        service = MessageService(db)
        gone = service.send_message(alice.id, bob.id, "secret plan")
        service.send_message(alice.id, bob.id, "public plan")
        service.delete_message(alice.id, gone.id, True)

        assert [h.content for h in SearchService(db).search(bob.id, "plan")] == ["public plan"]
        assert SearchService(db).search(eve.id, "plan") == []

    def test_group_hits(self, db, people):
        alice, bob, _ = people
        groups = GroupService(db)
        group = groups.create_group(alice.id, "Team", [bob.id])
        groups.send_message(bob.id, group.id, "standup notes")

        [hit] = SearchService(db).search(alice.id, "notes")
        assert hit.source == "group"
        assert hit.group_id == group.id
        assert hit.conversation_id is None

    def test_limit(self, db, people):
        alice, bob, _ = people
        service = MessageService(db)
        for i in range(5):
            service.send_message(alice.id, bob.id, f"ping {i}")

        assert len(SearchService(db).search(alice.id, "ping", limit=3)) == 3

    def test_candidates_capped_per_source(self, db, people):
        alice, bob, _ = people
        for i in range(5):
            MessageService(db, clock=lambda i=i: T0 + timedelta(minutes=i)).send_message(
                alice.id, bob.id, f"ping {i}"
            )

        hits = SearchService(db, scan_limit=3).search(alice.id, "ping", limit=10)

        assert [h.content for h in hits] == ["ping 4", "ping 3", "ping 2"]
