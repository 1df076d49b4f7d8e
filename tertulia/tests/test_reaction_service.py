"""Direct tests of services.reaction_service against the database."""

import pytest

from tertulia.core.errors import CapacityExceededError, ConflictError, NotFoundError, ValidationError
from tertulia.core.events import REACTION_CREATED, REACTION_DELETED, REACTION_REPLACED
from tertulia.core.time import utcnow
from tertulia.models.comment import Comment
from tertulia.models.reaction import Reaction
from tertulia.services import reaction_service
from tertulia.tests.conftest import make_post, make_user


class TestResolveSubject:
    def test_post(self, db):
        post = make_post(db, make_user(db, "author"))
        assert reaction_service.resolve_subject(db, "post", post.id).id == post.id

    def test_comment(self, db):
        author = make_user(db, "author")
        post = make_post(db, author)
        comment = Comment(post_id=post.id, user_id=author.id, content="hi")
        db.add(comment)
        db.commit()

        subject = reaction_service.resolve_subject(db, "comment", comment.id)
        assert isinstance(subject, Comment)
        assert reaction_service.subject_type_of(subject) == "comment"

    def test_unknown_type(self, db):
        with pytest.raises(ValidationError):
            reaction_service.resolve_subject(db, "user", 1)

    def test_missing(self, db):
        with pytest.raises(NotFoundError, match="Post not found."):
            reaction_service.resolve_subject(db, "post", 42)


class TestToggleReaction:
    def test_create_replace_delete(self, db):
        user = make_user(db, "reactor")
        post = make_post(db, user)

        created = reaction_service.toggle_reaction(db, user, post, "👍")
        assert created.status == REACTION_CREATED
        reaction_id = created.reaction.id
        first_created_at = created.reaction.created_at

        replaced = reaction_service.toggle_reaction(db, user, post, "🎉")
        assert replaced.status == REACTION_REPLACED
        # Same row, original timestamp
        assert replaced.reaction.id == reaction_id
        assert replaced.reaction.created_at == first_created_at

        deleted = reaction_service.toggle_reaction(db, user, post, "🎉")
        assert deleted.status == REACTION_DELETED
        assert deleted.reaction is None
        assert db.query(Reaction).count() == 0

    def test_blank_emoji(self, db):
        user = make_user(db, "reactor")
        post = make_post(db, user)
        with pytest.raises(ValidationError):
            reaction_service.toggle_reaction(db, user, post, "  ")

    def test_cap(self, db, monkeypatch):
        from tertulia.config import settings

        monkeypatch.setattr(settings, "MAX_DISTINCT_REACTIONS", 2)
        post = make_post(db, make_user(db, "author"))
        a, b, c = make_user(db, "a"), make_user(db, "b"), make_user(db, "c")

        reaction_service.toggle_reaction(db, a, post, "1️⃣")
        reaction_service.toggle_reaction(db, b, post, "2️⃣")
        with pytest.raises(CapacityExceededError, match="Maximum reactions reached."):
            reaction_service.toggle_reaction(db, c, post, "3️⃣")

        # Nothing was written by the rejected call
        assert db.query(Reaction).filter(Reaction.user_id == c.id).count() == 0

    def test_lost_race_rolls_back_and_conflicts(self, db, monkeypatch):
        user = make_user(db, "reactor")
        post = make_post(db, user)

        def racing_check(db_, subject, emoji, freed=None):
            # Another request commits this user's first reaction in between
            db_.execute(
                Reaction.__table__.insert().values(
                    subject_type="post", subject_id=post.id, user_id=user.id, emoji="🏃", created_at=utcnow()
                )
            )
            db_.commit()

        monkeypatch.setattr(reaction_service, "_check_capacity", racing_check)
        with pytest.raises(ConflictError):
            reaction_service.toggle_reaction(db, user, post, "👍")

        # Only the winner's row is left and the session is usable again
        assert [(r.user_id, r.emoji) for r in db.query(Reaction).all()] == [(user.id, "🏃")]
        monkeypatch.undo()
        assert reaction_service.toggle_reaction(db, user, post, "🏃").status == REACTION_DELETED


class TestAggregate:
    def test_empty(self, db):
        post = make_post(db, make_user(db, "author"))
        assert reaction_service.aggregate_reactions(db, post) == []

    def test_counts_and_order(self, db):
        post = make_post(db, make_user(db, "author"))
        users = [make_user(db, f"u{i}") for i in range(4)]
        for user, emoji in zip(users, ["🙂", "🎉", "🎉", "🔥"]):
            reaction_service.toggle_reaction(db, user, post, emoji)

        assert reaction_service.aggregate_reactions(db, post) == [("🎉", 2), ("🙂", 1), ("🔥", 1)]

    def test_switching_and_removing(self, db):
        post = make_post(db, make_user(db, "author"))
        a, b = make_user(db, "a"), make_user(db, "b")

        reaction_service.toggle_reaction(db, a, post, "👍")
        reaction_service.toggle_reaction(db, b, post, "👍")
        assert reaction_service.aggregate_reactions(db, post) == [("👍", 2)]

        assert reaction_service.toggle_reaction(db, a, post, "❤️").status == REACTION_REPLACED
        assert dict(reaction_service.aggregate_reactions(db, post)) == {"👍": 1, "❤️": 1}

        assert reaction_service.toggle_reaction(db, a, post, "❤️").status == REACTION_DELETED
        assert reaction_service.aggregate_reactions(db, post) == [("👍", 1)]
        assert reaction_service.user_emoji(db, post, a) is None
        assert reaction_service.user_emoji(db, post, b) == "👍"

    def test_counts_sum_to_rows(self, db):
        post = make_post(db, make_user(db, "author"))
        users = [make_user(db, f"u{i}") for i in range(7)]
        for user, emoji in zip(users, ["🙂", "🎉", "🎉", "🔥", "🙂", "🎉", "🌮"]):
            reaction_service.toggle_reaction(db, user, post, emoji)
        reaction_service.toggle_reaction(db, users[0], post, "🎉")
        reaction_service.toggle_reaction(db, users[3], post, "🔥")

        counts = reaction_service.aggregate_reactions(db, post)
        rows = db.query(Reaction).filter(Reaction.subject_type == "post", Reaction.subject_id == post.id).count()
        assert rows == 6
        assert sum(count for _, count in counts) == rows
        assert [emoji for emoji, _ in counts] == ["🎉", "🙂", "🌮"]

    def test_post_and_comment_counted_apart(self, db):
        author = make_user(db, "author")
        post = make_post(db, author)
        comment = Comment(post_id=post.id, user_id=author.id, content="hi")
        db.add(comment)
        db.commit()

        reaction_service.toggle_reaction(db, author, post, "👍")
        reaction_service.toggle_reaction(db, author, comment, "👎")

        assert reaction_service.aggregate_reactions(db, post) == [("👍", 1)]
        assert reaction_service.aggregate_reactions(db, comment) == [("👎", 1)]

    def test_user_emoji(self, db):
        author = make_user(db, "author")
        post = make_post(db, author)
        assert reaction_service.user_emoji(db, post, author) is None
        assert reaction_service.user_emoji(db, post, None) is None

        reaction_service.toggle_reaction(db, author, post, "👍")
        assert reaction_service.user_emoji(db, post, author) == "👍"


class TestListReactors:
    def test_no_reactions(self, db):
        post = make_post(db, make_user(db, "author"))
        page = reaction_service.list_reactors(db, post)
        assert page.selected_emoji is None
        assert page.users == []
        assert page.next_cursor is None

    def test_unused_emoji(self, db):
        author = make_user(db, "author")
        post = make_post(db, author)
        reaction_service.toggle_reaction(db, author, post, "👍")

        page = reaction_service.list_reactors(db, post, emoji="🦆")
        assert page.selected_emoji == "🦆"
        assert page.users == []

    def test_paging(self, db, monkeypatch):
        from tertulia.config import settings

        monkeypatch.setattr(settings, "REACTIONS_PAGE_SIZE", 1)
        post = make_post(db, make_user(db, "author"))
        first, second = make_user(db, "first"), make_user(db, "second")
        reaction_service.toggle_reaction(db, first, post, "👍")
        reaction_service.toggle_reaction(db, second, post, "👍")

        page = reaction_service.list_reactors(db, post)
        assert [u.username for u in page.users] == ["second"]

        page = reaction_service.list_reactors(db, post, cursor=page.next_cursor)
        assert [u.username for u in page.users] == ["first"]
        assert page.next_cursor is None
