"""Invite registry domain service."""

import secrets
from datetime import timedelta
from urllib.parse import quote

import logfire
from pydantic import BaseModel

from mailpool.config import InvitationSettings
from mailpool.domain.error import (
    DomainError,
    ExhaustedError,
    ExpiredError,
    InvalidMethodError,
    UnavailableError,
    ValidationError,
)
from mailpool.domain.model import (
    InvitePayload,
    InviteRedemptionRecord,
    RedemptionUse,
    RegistrationMethods,
)
from mailpool.domain.repository import InviteRedemptionRepository
from mailpool.domain.value import (
    ErrorDetail,
    InviteId,
    InviteType,
    RegistrationMethod,
    TokenContext,
    UserId,
)

from .base import DEFAULT_STORE_TIMEOUT_SECONDS, Clock, Service, utc_now
from .token_codec import TokenCodec


class InviteConfig(BaseModel):
    """Invite issuance request.

    Custom invites must provide every quota field; quick invites ignore them.
    """

    type: InviteType = InviteType.CUSTOM
    imap_email_count: int | None = None
    graph_email_count: int | None = None
    max_registrations: int | None = None
    valid_days: int | None = None
    registration_methods: RegistrationMethods | None = None
    allow_batch_add_emails: bool = True
    auto_create_trial_account: bool = False
    created_by: str | None = None


class IssuedInvite(BaseModel):
    """Sealed invite ready to share."""

    payload: InvitePayload
    token: str
    url: str


class InviteVerification(BaseModel):
    """Outcome of verifying an invite token."""

    is_valid: bool
    can_use: bool
    remaining_uses: int | None = None
    error: ErrorDetail | None = None
    payload: InvitePayload | None = None


class InviteGrant(BaseModel):
    """Quotas and flags the caller acts on after a redemption."""

    invite_id: InviteId
    imap_email_count: int
    graph_email_count: int
    allow_batch_add_emails: bool
    auto_create_trial_account: bool
    created_by: str | None = None
    used_count: int


class InviteRedemption(BaseModel):
    """Outcome of redeeming an invite token."""

    success: bool
    data: InviteGrant | None = None
    error: ErrorDetail | None = None


class InviteRegistry(Service):
    """Domain service owning the invite lifecycle.

    State machine per invite id:
        Issued -> Active (0 <= used_count < max) -> Exhausted (used_count == max)
        Active | Exhausted -> Expired once now >= expires_at
    Expired is reported in preference to Exhausted.
    """

    def __init__(
        self,
        codec: TokenCodec,
        redemption_repository: InviteRedemptionRepository,
        invitation_settings: InvitationSettings,
        invite_base_url: str,
        max_redeem_attempts: int = 8,
        store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize invite registry.

        Args:
            codec: Token codec
            redemption_repository: Redemption record repository
            invitation_settings: Quick-invite defaults
            invite_base_url: Origin shareable invite URLs are built on
            max_redeem_attempts: Compare-and-set attempts per redemption
            store_timeout_seconds: Bound on each store call
            clock: Source of the current UTC time
        """
        self.codec = codec
        self.redemption_repository = redemption_repository
        self.invitation_settings = invitation_settings
        self.invite_base_url = invite_base_url.rstrip("/")
        self.max_redeem_attempts = max_redeem_attempts
        self.store_timeout_seconds = store_timeout_seconds
        self.clock = clock

    def issue(self, config: InviteConfig) -> IssuedInvite:
        """Issue a new invite.

        Args:
            config: Issuance request

        Returns:
            Payload, sealed token and shareable URL

        Raises:
            ValidationError: If a custom request is missing or has non-positive fields
        """
        with logfire.span("invite_registry.issue", type=config.type.value):
            if config.type is InviteType.QUICK:
                payload = self._quick_payload(config.created_by)
            else:
                payload = self._custom_payload(config)

            token = self.codec.seal(payload, TokenContext.INVITE)
            url = f"{self.invite_base_url}/invite/{quote(token, safe='')}"

            logfire.info(
                "Invite issued",
                invite_id=payload.id,
                type=config.type.value,
                max_registrations=payload.max_registrations,
                valid_days=payload.valid_days,
                token_length=len(token),
            )
            return IssuedInvite(payload=payload, token=token, url=url)

    def _quick_payload(self, created_by: str | None) -> InvitePayload:
        settings = self.invitation_settings
        now = self.clock()
        return InvitePayload(
            id=self._new_id(),
            created_at=now,
            created_by=created_by or settings.default_creator,
            expires_at=now + timedelta(days=settings.quick_valid_days),
            imap_email_count=settings.quick_imap_email_count,
            graph_email_count=settings.quick_graph_email_count,
            max_registrations=settings.quick_max_registrations,
            registration_methods=RegistrationMethods.all_enabled(),
            allow_batch_add_emails=True,
            auto_create_trial_account=True,
        )

    def _custom_payload(self, config: InviteConfig) -> InvitePayload:
        required = {
            "imap_email_count": config.imap_email_count,
            "graph_email_count": config.graph_email_count,
            "max_registrations": config.max_registrations,
            "valid_days": config.valid_days,
        }
        missing = [name for name, value in required.items() if value is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        not_positive = [name for name, value in required.items() if value <= 0]
        if not_positive:
            raise ValidationError(
                f"Fields must be positive: {', '.join(not_positive)}"
            )

        now = self.clock()
        return InvitePayload(
            id=self._new_id(),
            created_at=now,
            created_by=config.created_by or self.invitation_settings.default_creator,
            expires_at=now + timedelta(days=config.valid_days),
            imap_email_count=config.imap_email_count,
            graph_email_count=config.graph_email_count,
            max_registrations=config.max_registrations,
            registration_methods=config.registration_methods or RegistrationMethods(),
            allow_batch_add_emails=config.allow_batch_add_emails,
            auto_create_trial_account=config.auto_create_trial_account,
        )

    @staticmethod
    def _new_id() -> InviteId:
        return InviteId(secrets.token_hex(8))

    async def verify(self, token: str) -> InviteVerification:
        """Verify an invite token without mutating anything.

        Args:
            token: Invite token, possibly percent-encoded

        Returns:
            Verification result
        """
        with logfire.span("invite_registry.verify", token=token[:8] + "..."):
            try:
                payload = self.codec.unseal_invite(self.codec.normalize(token))
            except DomainError as e:
                return InviteVerification(
                    is_valid=False, can_use=False, error=ErrorDetail.from_error(e)
                )

            record = await self._load_record(payload.id)
            return self._evaluate(payload, record)

    def _evaluate(
        self, payload: InvitePayload, record: InviteRedemptionRecord
    ) -> InviteVerification:
        remaining = record.remaining(payload.max_registrations)

        error: DomainError | None = None
        if payload.is_expired(self.clock()):
            error = ExpiredError("Invite has expired")
        elif remaining <= 0:
            error = ExhaustedError()

        if error:
            logfire.info(
                "Invite not usable",
                invite_id=payload.id,
                kind=error.kind.value,
                used_count=record.used_count,
            )
        return InviteVerification(
            is_valid=True,
            can_use=error is None,
            remaining_uses=remaining,
            error=ErrorDetail.from_error(error) if error else None,
            payload=payload,
        )

    async def redeem(
        self, token: str, user_id: UserId, method: str
    ) -> InviteRedemption:
        """Redeem an invite for one registration.

        The use is recorded with a compare-and-set on the stored count, so
        concurrent redemptions can never push used_count past
        max_registrations.

        Args:
            token: Invite token, possibly percent-encoded
            user_id: Registering user
            method: Registration method name

        Returns:
            Redemption result with quotas on success

        Raises:
            UnavailableError: If the store is unreachable or stays contended
        """
        with logfire.span(
            "invite_registry.redeem",
            token=token[:8] + "...",
            user_id=user_id,
            method=method,
        ):
            try:
                payload = self.codec.unseal_invite(self.codec.normalize(token))
            except DomainError as e:
                return InviteRedemption(success=False, error=ErrorDetail.from_error(e))

            for attempt in range(1, self.max_redeem_attempts + 1):
                record = await self._load_record(payload.id)
                verification = self._evaluate(payload, record)
                if not verification.can_use:
                    return InviteRedemption(success=False, error=verification.error)

                try:
                    registration_method = RegistrationMethod(method)
                except ValueError:
                    registration_method = None
                if not (
                    registration_method
                    and payload.registration_methods.allows(registration_method)
                ):
                    logfire.info(
                        "Registration method rejected",
                        invite_id=payload.id,
                        method=method,
                    )
                    return InviteRedemption(
                        success=False,
                        error=ErrorDetail.from_error(InvalidMethodError()),
                    )

                use = RedemptionUse(
                    user_id=user_id,
                    method=registration_method,
                    timestamp=self.clock(),
                )
                recorded = await self._store(
                    self.redemption_repository.append_use_if_count(
                        payload.id, record.used_count, use
                    ),
                    "invite_redemption.append_use",
                )
                if recorded:
                    logfire.info(
                        "Invite redeemed",
                        invite_id=payload.id,
                        user_id=user_id,
                        method=registration_method.value,
                        used_count=record.used_count + 1,
                        attempt=attempt,
                    )
                    return InviteRedemption(
                        success=True,
                        data=InviteGrant(
                            invite_id=payload.id,
                            imap_email_count=payload.imap_email_count,
                            graph_email_count=payload.graph_email_count,
                            allow_batch_add_emails=payload.allow_batch_add_emails,
                            auto_create_trial_account=payload.auto_create_trial_account,
                            created_by=payload.created_by,
                            used_count=record.used_count + 1,
                        ),
                    )

                logfire.debug(
                    "Invite redemption conflict, retrying",
                    invite_id=payload.id,
                    attempt=attempt,
                )

            logfire.error(
                "Invite redemption gave up after repeated conflicts",
                invite_id=payload.id,
                attempts=self.max_redeem_attempts,
            )
            raise UnavailableError()

    async def usage(self, invite_id: InviteId) -> InviteRedemptionRecord:
        """Get the redemption record of an invite.

        Args:
            invite_id: Invite identifier

        Returns:
            The record (empty if the invite was never redeemed)
        """
        with logfire.span("invite_registry.usage", invite_id=invite_id):
            return await self._load_record(invite_id)

    async def _load_record(self, invite_id: InviteId) -> InviteRedemptionRecord:
        record = await self._store(
            self.redemption_repository.find_by_invite_id(invite_id),
            "invite_redemption.find",
        )
        return record or InviteRedemptionRecord(invite_id=invite_id)
