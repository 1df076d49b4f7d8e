"""
Keyset (cursor) pagination over (created_at DESC, id DESC).

A cursor is the URL-safe base64 of ``{"created_at": <iso>, "id": <int>}``
taken from the last row of a page. The next page is everything strictly
after that key, so rows inserted later (newer, higher ids) never shift it.
"""

import base64
import binascii
import json
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query

from tertulia.core.errors import ValidationError


def encode_cursor(created_at: datetime, row_id: int) -> str:
    raw = json.dumps({"created_at": created_at.isoformat(), "id": row_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, int]:
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode()))
        created_at = datetime.fromisoformat(data["created_at"])
        row_id = int(data["id"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
        raise ValidationError("Invalid cursor.") from exc
    return created_at, row_id


def paginate_desc(query: Query, model, cursor: str | None, page_size: int) -> tuple[list, str | None]:
    """
    Apply the keyset ordering to ``query`` and return ``(rows, next_cursor)``.

    ``model`` must expose ``created_at`` and ``id`` columns. One extra row is
    fetched to learn whether a further page exists.
    """
    if cursor:
        created_at, row_id = decode_cursor(cursor)
        query = query.filter(
            or_(
                model.created_at < created_at,
                and_(model.created_at == created_at, model.id < row_id),
            )
        )

    rows = query.order_by(model.created_at.desc(), model.id.desc()).limit(page_size + 1).all()
    if len(rows) <= page_size:
        return rows, None

    rows = rows[:page_size]
    last = rows[-1]
    return rows, encode_cursor(last.created_at, last.id)
