"""Session management models."""

from datetime import UTC, datetime, timedelta
from typing import Any, NewType, Self

from pydantic import BaseModel, ConfigDict, Field

SessionToken = NewType("SessionToken", str)


class Session(BaseModel):
    """Persisted authentication session.

    Stored as {_id, secret_hash, created_at}. Immutable once written.
    """

    id: str
    secret_hash: bytes
    created_at: int  # unix seconds

    model_config = ConfigDict(frozen=True)

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a document with _id field."""
        return {"_id": self.id, "secret_hash": self.secret_hash, "created_at": self.created_at}

    @classmethod
    def from_mongo(cls, document: dict[str, Any]) -> Self:
        return cls(id=document["_id"], secret_hash=bytes(document["secret_hash"]), created_at=document["created_at"])

    def expires_at(self, ttl: timedelta) -> int:
        return self.created_at + int(ttl.total_seconds())


class SessionView(BaseModel):
    """Session information safe to expose (API representation)."""

    id: str = Field(..., description="Session ID (public half of the token)")
    created_at: datetime = Field(..., description="When the session was issued")
    expires_at: datetime = Field(..., description="When the session stops being accepted")

    @classmethod
    def from_domain(cls, session: Session, ttl: timedelta) -> "SessionView":
        """Create view model from domain model."""
        return cls(
            id=session.id,
            created_at=datetime.fromtimestamp(session.created_at, UTC),
            expires_at=datetime.fromtimestamp(session.expires_at(ttl), UTC),
        )


class IssuedSession(BaseModel):
    """Freshly minted token with its public view. The token is never stored."""

    token: SessionToken
    session: SessionView
