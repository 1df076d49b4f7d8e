from datetime import datetime, timedelta, timezone

import pytest

from tertulia.core.errors import ValidationError
from tertulia.models.post import Post
from tertulia.services.pagination import decode_cursor, encode_cursor, paginate_desc
from tertulia.tests.conftest import make_user


def test_cursor_is_url_safe():
    cursor = encode_cursor(datetime(2024, 5, 1, 12, 30, 0, 123456), 987654)
    assert "=" not in cursor
    assert "+" not in cursor
    assert "/" not in cursor
    assert decode_cursor(cursor) == (datetime(2024, 5, 1, 12, 30, 0, 123456), 987654)


@pytest.mark.parametrize("cursor", ["", "%%%", "bm90IGpzb24", "eyJpZCI6IDF9"])
def test_bad_cursors(cursor):
    # plain garbage, non-JSON payload, JSON without created_at
    with pytest.raises(ValidationError, match="Invalid cursor."):
        decode_cursor(cursor)


def test_same_timestamp_breaks_tie_on_id(db):
    author = make_user(db, "author")
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(5):
        db.add(Post(user_id=author.id, content=f"p{i}", created_at=stamp))
    db.commit()

    seen = []
    cursor = None
    while True:
        rows, cursor = paginate_desc(db.query(Post), Post, cursor, 2)
        seen.extend(p.content for p in rows)
        if cursor is None:
            break
    assert seen == ["p4", "p3", "p2", "p1", "p0"]


def test_newer_rows_do_not_shift_later_pages(db):
    author = make_user(db, "author")
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(4):
        db.add(Post(user_id=author.id, content=f"p{i}", created_at=base + timedelta(minutes=i)))
    db.commit()

    rows, cursor = paginate_desc(db.query(Post), Post, None, 2)
    assert [p.content for p in rows] == ["p3", "p2"]

    db.add(Post(user_id=author.id, content="late", created_at=base + timedelta(hours=1)))
    db.commit()

    rows, cursor = paginate_desc(db.query(Post), Post, cursor, 2)
    assert [p.content for p in rows] == ["p1", "p0"]
    assert cursor is None
