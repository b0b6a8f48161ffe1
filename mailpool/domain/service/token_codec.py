"""Token sealing domain service."""

from typing import Any
from urllib.parse import unquote

import logfire
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mailpool.config import MIN_SECRET_LENGTH
from mailpool.domain.error import DecodeError, DomainError
from mailpool.domain.model import CardKeyPayload, InvitePayload
from mailpool.domain.value import TokenContext
from mailpool.util import sealing
from mailpool.util.error import ConfigurationError

from .base import Service

# Payload model per context; picked only after authentication succeeded.
PAYLOAD_MODELS: dict[TokenContext, type[BaseModel]] = {
    TokenContext.INVITE: InvitePayload,
    TokenContext.CARD: CardKeyPayload,
}


class TokenCodec(Service):
    """Seals payloads into opaque tokens and unseals them.

    Pure given the process secret: holds only the derived per-context keys.
    """

    def __init__(self, secret: str | None) -> None:
        """Initialize the codec.

        Args:
            secret: Process-wide sealing secret

        Raises:
            ConfigurationError: If the secret is missing or too short
        """
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"Sealing secret must be at least {MIN_SECRET_LENGTH} characters"
            )
        self._keys = {
            context: sealing.derive_key(secret, context.value)
            for context in TokenContext
        }

    @staticmethod
    def normalize(raw: str) -> str:
        """Undo one round of URL percent-encoding.

        Falls back to the raw string when it does not decode.

        Args:
            raw: Token as received from a URL, form or JSON body

        Returns:
            Token ready for unsealing
        """
        raw = raw.strip()
        try:
            return unquote(raw, errors="strict")
        except UnicodeDecodeError:
            logfire.debug("Token percent-decoding failed, using raw value")
            return raw

    def seal(self, payload: BaseModel | dict[str, Any], context: TokenContext) -> str:
        """Seal a payload under a context.

        Args:
            payload: Pydantic model or JSON-compatible mapping
            context: Sealing context

        Returns:
            URL-safe sealed token
        """
        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json")
        else:
            data = payload
        return sealing.seal(
            data, self._keys[context], context.value, prefix=context.prefix
        )

    def unseal(self, token: str, context: TokenContext) -> dict[str, Any]:
        """Unseal a token into its raw payload mapping.

        Args:
            token: Sealed token
            context: Context the token must have been sealed under

        Returns:
            Payload mapping

        Raises:
            DecodeError: If the token is malformed
            IntegrityError: If authentication fails
        """
        try:
            return sealing.unseal(
                token, self._keys[context], context.value, prefix=context.prefix
            )
        except DomainError as e:
            logfire.warn(
                "Token unseal failed",
                context=context.value,
                reason=type(e).__name__,
                token=token[:8] + "...",
            )
            raise

    def unseal_as(self, token: str, context: TokenContext) -> BaseModel:
        """Unseal a token and validate it as the context's payload model.

        Raises:
            DecodeError: If the token is malformed or the authentic payload
                does not match the context's model
            IntegrityError: If authentication fails
        """
        data = self.unseal(token, context)
        model = PAYLOAD_MODELS[context]
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logfire.warn(
                "Authentic token with unexpected payload shape",
                context=context.value,
                error_count=e.error_count(),
            )
            raise DecodeError() from e

    def unseal_invite(self, token: str) -> InvitePayload:
        return self.unseal_as(token, TokenContext.INVITE)

    def unseal_card_key(self, token: str) -> CardKeyPayload:
        return self.unseal_as(token, TokenContext.CARD)
