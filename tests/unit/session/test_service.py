"""Tests for SessionService."""

from datetime import timedelta

import pytest

from sessiongate.core.modules.session.hashing import hash_secret
from sessiongate.core.modules.session.models import Session
from sessiongate.core.modules.session.service import SessionService
from sessiongate.core.modules.session.tokens import TOKEN_ALPHABET, decode_token
from sessiongate.errors import (
    AuthenticationError,
    InvalidSessionError,
    ServiceUnavailableError,
    SessionCreationFailedError,
    SessionFailureReason,
    StoreUnavailableError,
)

DAY = 24 * 60 * 60


async def assert_rejected(service: SessionService, token: str, reason: SessionFailureReason) -> None:
    with pytest.raises(InvalidSessionError) as exc_info:
        await service.validate_token(token)
    assert exc_info.value.reason == reason


class TestCreateSession:
    """Tests for session creation."""

    @pytest.mark.asyncio
    async def test_token_format(self, service):
        """Test that the token is two 24-character alphabet strings joined by a dot."""
        issued = await service.create_session()

        session_id, secret = decode_token(issued.token)
        assert len(session_id) == len(secret) == 24
        assert set(session_id + secret) <= set(TOKEN_ALPHABET)
        assert session_id != secret
        assert issued.session.id == session_id

    @pytest.mark.asyncio
    async def test_only_hash_is_persisted(self, service, store, clock):
        """Test that the store holds the secret hash and issuance time, never the secret."""
        issued = await service.create_session()
        session_id, secret = decode_token(issued.token)

        stored = store.rows[session_id]
        assert stored.secret_hash == hash_secret(secret)
        assert stored.created_at == clock.now
        assert secret not in repr(stored.model_dump())

    @pytest.mark.asyncio
    async def test_view_timestamps(self, service, clock):
        """Test that the public view reports issuance and expiry."""
        issued = await service.create_session()

        assert int(issued.session.created_at.timestamp()) == clock.now
        assert int(issued.session.expires_at.timestamp()) == clock.now + DAY
        assert "secret_hash" not in issued.session.model_dump()

    @pytest.mark.asyncio
    async def test_store_failure(self, service, store):
        """Test that store failures surface as SessionCreationFailedError."""
        store.available = False

        with pytest.raises(SessionCreationFailedError) as exc_info:
            await service.create_session()

        assert isinstance(exc_info.value, ServiceUnavailableError)
        assert isinstance(exc_info.value.__cause__, StoreUnavailableError)

    @pytest.mark.asyncio
    async def test_duplicate_id_is_not_ignored(self, service, store, monkeypatch):
        """Test that an id collision fails creation instead of overwriting."""
        monkeypatch.setattr(
            "sessiongate.core.modules.session.service.generate_secure_random_string", lambda n: "a" * n
        )
        await service.create_session()

        with pytest.raises(SessionCreationFailedError):
            await service.create_session()
        assert len(store.rows) == 1


class TestValidateToken:
    """Tests for token validation."""

    @pytest.mark.asyncio
    async def test_fresh_token_is_valid(self, service):
        """Test that a token validates immediately after creation."""
        issued = await service.create_session()

        session = await service.validate_token(issued.token)

        assert isinstance(session, Session)
        assert session.id == issued.session.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["abc", "a.b.c", "", "abc."])
    async def test_malformed(self, service, store, token):
        """Test that malformed tokens are rejected without touching the store."""
        store.available = False
        await assert_rejected(service, token, SessionFailureReason.MALFORMED)

    @pytest.mark.asyncio
    async def test_unencodable_secret_is_malformed(self, service):
        """Test that a lone surrogate in a known session's token is malformed, not a crash."""
        issued = await service.create_session()

        await assert_rejected(service, f"{issued.session.id}.\ud800abc", SessionFailureReason.MALFORMED)
        assert await service.is_token_valid(f"{issued.session.id}.\ud800abc") is False

    @pytest.mark.asyncio
    async def test_unencodable_id_never_reaches_store(self, service, store):
        """Test that a lone surrogate in the id is rejected before any store lookup."""
        store.available = False

        await assert_rejected(service, "\udfffid.secret", SessionFailureReason.MALFORMED)

    @pytest.mark.asyncio
    async def test_unknown_id(self, service):
        """Test that an unknown id is rejected as not found."""
        await assert_rejected(service, "unknownid.unknownsecret", SessionFailureReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_wrong_secret(self, service):
        """Test that a wrong secret for a known id is a mismatch."""
        issued = await service.create_session()
        await assert_rejected(service, f"{issued.session.id}.wrongsecret", SessionFailureReason.SECRET_MISMATCH)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bit", [0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x80])
    async def test_single_bit_flip_in_secret(self, service, store, bit):
        """Test that flipping one bit anywhere in the secret is a mismatch, never a pass.

        Bit 0x40 is excluded: it turns "n" into the delimiter, which makes the token malformed.
        """
        issued = await service.create_session()
        session_id, secret = decode_token(issued.token)

        for i, char in enumerate(secret):
            tampered = secret[:i] + chr(ord(char) ^ bit) + secret[i + 1 :]
            await assert_rejected(service, f"{session_id}.{tampered}", SessionFailureReason.SECRET_MISMATCH)

        assert session_id in store.rows

    @pytest.mark.asyncio
    async def test_valid_just_before_expiry(self, service, clock):
        """Test that a session is accepted one second before the TTL elapses."""
        issued = await service.create_session()
        clock.advance(DAY - 1)

        session = await service.validate_token(issued.token)
        assert session.id == issued.session.id

    @pytest.mark.asyncio
    async def test_expired_at_exact_ttl(self, service, clock):
        """Test that a session is expired once exactly the TTL has elapsed."""
        issued = await service.create_session()
        clock.advance(DAY)

        await assert_rejected(service, issued.token, SessionFailureReason.EXPIRED)

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted(self, service, store, clock):
        """Test that validating an expired session deletes it, and later lookups see nothing."""
        issued = await service.create_session()
        clock.advance(DAY + 1)

        await assert_rejected(service, issued.token, SessionFailureReason.EXPIRED)

        assert await store.fetch_by_id(issued.session.id) is None
        await assert_rejected(service, issued.token, SessionFailureReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_wrong_secret_does_not_delete_expired_session(self, service, store, clock):
        """Test that only a holder of the secret triggers expiry cleanup."""
        issued = await service.create_session()
        clock.advance(DAY + 1)

        await assert_rejected(service, f"{issued.session.id}.wrongsecret", SessionFailureReason.SECRET_MISMATCH)
        assert issued.session.id in store.rows

    @pytest.mark.asyncio
    async def test_custom_ttl(self, store, clock):
        """Test that the expiration window is configurable."""
        service = SessionService(store, ttl=timedelta(minutes=5), clock=clock)
        issued = await service.create_session()
        clock.advance(300)

        await assert_rejected(service, issued.token, SessionFailureReason.EXPIRED)

    @pytest.mark.asyncio
    async def test_reasons_share_public_message(self, service, clock):
        """Test that every rejection reason has the same message and is an AuthenticationError."""
        issued = await service.create_session()
        tokens = ["abc", "nope.nope", f"{issued.session.id}.nope"]
        messages = set()
        for token in tokens:
            with pytest.raises(AuthenticationError) as exc_info:
                await service.validate_token(token)
            messages.add(str(exc_info.value))
        clock.advance(DAY)
        with pytest.raises(AuthenticationError) as exc_info:
            await service.validate_token(issued.token)
        messages.add(str(exc_info.value))

        assert messages == {"Invalid or expired session"}

    @pytest.mark.asyncio
    async def test_store_outage_propagates(self, service, store):
        """Test that a store outage is not reported as an invalid token."""
        issued = await service.create_session()
        store.available = False

        with pytest.raises(StoreUnavailableError):
            await service.validate_token(issued.token)

    @pytest.mark.asyncio
    async def test_reads_store_on_every_call(self, service, store):
        """Test that sessions are not cached between validations."""
        issued = await service.create_session()
        await service.validate_token(issued.token)
        store.rows.clear()

        await assert_rejected(service, issued.token, SessionFailureReason.NOT_FOUND)


class TestIsTokenValid:
    """Tests for the boolean validation helper."""

    @pytest.mark.asyncio
    async def test_valid_and_invalid(self, service):
        """Test that validation folds to True/False."""
        issued = await service.create_session()

        assert await service.is_token_valid(issued.token) is True
        assert await service.is_token_valid("abc") is False
        assert await service.is_token_valid(f"{issued.session.id}.nope") is False


class TestRevoke:
    """Tests for session revocation."""

    @pytest.mark.asyncio
    async def test_revoked_token_not_found(self, service):
        """Test that a revoked session can no longer be validated."""
        issued = await service.create_session()

        await service.revoke_session(issued.session.id)

        await assert_rejected(service, issued.token, SessionFailureReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, service):
        """Test that revoking twice, or revoking an unknown id, is not an error."""
        issued = await service.create_session()

        await service.revoke_session(issued.session.id)
        await service.revoke_session(issued.session.id)
        await service.revoke_session("neverexisted")

    @pytest.mark.asyncio
    async def test_revoke_leaves_other_sessions(self, service):
        """Test that revoking one session does not affect another."""
        first = await service.create_session()
        second = await service.create_session()

        await service.revoke_session(first.session.id)

        assert await service.is_token_valid(second.token)

    @pytest.mark.asyncio
    async def test_revoke_token(self, service, store):
        """Test that signing out by token removes that session."""
        issued = await service.create_session()

        await service.revoke_token(issued.token)

        assert issued.session.id not in store.rows

    @pytest.mark.asyncio
    async def test_revoke_token_requires_secret(self, service, store):
        """Test that a token with the wrong secret cannot sign out a session."""
        issued = await service.create_session()

        with pytest.raises(InvalidSessionError):
            await service.revoke_token(f"{issued.session.id}.nope")

        assert issued.session.id in store.rows


class TestLifecycle:
    """Tests for service startup and construction."""

    @pytest.mark.asyncio
    async def test_on_start_creates_schema(self, service, store):
        """Test that startup creates the sessions table."""
        await service.on_start()
        assert store.schema_created

    def test_rejects_non_positive_ttl(self, store):
        """Test that a zero TTL is refused."""
        with pytest.raises(ValueError):
            SessionService(store, ttl=timedelta(0))
