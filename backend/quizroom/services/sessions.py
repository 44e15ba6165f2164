"""Session identity: opaque tokens mapped to users.

A token is issued when someone joins a room and is then attached to every
privileged call, either as ``Authorization: Bearer <token>`` or through the
cookie set by the join response. Tokens live for a fixed TTL from issue.
"""
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app
from sqlalchemy import or_

from quizroom import db
from quizroom.errors import Unauthenticated
from quizroom.models import SessionToken, User, utcnow


@dataclass(frozen=True)
class SessionContext:
    user_id: int
    token_id: int
    expires_at: datetime

    @property
    def user(self) -> Optional[User]:
        return db.session.get(User, self.user_id)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def session_ttl() -> timedelta:
    return timedelta(hours=int(current_app.config.get('SESSION_TTL_HOURS', 24)))


def issue_session(user: User, now: Optional[datetime] = None) -> tuple[str, SessionToken]:
    """Create a token row for `user` in the current transaction.

    Returns the raw token (only ever handed to the client) and the row.
    """
    now = now or utcnow()
    raw = secrets.token_urlsafe(32)
    row = SessionToken(
        token_hash=_digest(raw),
        user_id=user.id,
        issued_at=now,
        expires_at=now + session_ttl(),
    )
    db.session.add(row)
    db.session.flush()
    current_app.logger.info(f"[session] issued token={row.id} user={user.id} expires={row.expires_at.isoformat()}")
    return raw, row


def resolve_session(token: Optional[str], now: Optional[datetime] = None) -> Optional[SessionContext]:
    if not token:
        return None
    row = SessionToken.query.filter_by(token_hash=_digest(token)).first()
    if row is None or not row.is_valid(now):
        return None
    return SessionContext(user_id=row.user_id, token_id=row.id, expires_at=row.expires_at)


def require_session(ctx: Optional[SessionContext]) -> SessionContext:
    if ctx is None:
        raise Unauthenticated()
    return ctx


def revoke_session(ctx: SessionContext) -> None:
    row = db.session.get(SessionToken, ctx.token_id)
    if row is not None and row.revoked_at is None:
        row.revoked_at = utcnow()
        current_app.logger.info(f"[session] revoked token={row.id} user={row.user_id}")


def token_from_request(req) -> Optional[str]:
    """Bearer header wins over the cookie."""
    header = req.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip() or None
    return req.cookies.get(current_app.config.get('SESSION_TOKEN_COOKIE', 'quiz_session'))


def purge_expired_sessions(now: Optional[datetime] = None) -> int:
    """Delete tokens that expired or were revoked; returns how many went."""
    now = now or utcnow()
    purged = (
        SessionToken.query
        .filter(or_(SessionToken.expires_at <= now, SessionToken.revoked_at.isnot(None)))
        .delete(synchronize_session=False)
    )
    current_app.logger.info(f"[session] purged {purged} expired or revoked tokens")
    return purged
