"""Add pooled identities use case."""

import logfire
from pydantic import BaseModel, Field, field_validator

from mailpool.application.usecase.base import TransactionalUseCase
from mailpool.domain.model import PooledIdentity
from mailpool.domain.repository import Transaction
from mailpool.domain.service import ResourcePool
from mailpool.domain.value import IdentityProtocol, PoolTier


class IdentityInput(BaseModel):
    """One identity to add."""

    email: str = Field(min_length=3, max_length=320)
    tier: PoolTier
    protocol: IdentityProtocol = IdentityProtocol.IMAP
    banned: bool = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Not an email address")
        return v


class AddIdentitiesRequest(BaseModel):
    """Add identities request."""

    identities: list[IdentityInput] = Field(min_length=1, max_length=1000)


class AddIdentitiesResponse(BaseModel):
    """Add identities response."""

    added: int
    skipped: int


class AddIdentitiesUseCase(TransactionalUseCase):
    """Use case for stocking the pool with new identities."""

    def __init__(self, resource_pool: ResourcePool, transaction: Transaction) -> None:
        """Initialize use case.

        Args:
            resource_pool: Pooled identity domain service
            transaction: Request transaction
        """
        super().__init__(transaction)
        self.resource_pool = resource_pool

    async def execute(self, request: AddIdentitiesRequest) -> AddIdentitiesResponse:
        with logfire.span("add_identities.execute", count=len(request.identities)):
            async with self.atomic():
                result = await self.resource_pool.add_identities(
                    [
                        PooledIdentity(**item.model_dump())
                        for item in request.identities
                    ]
                )
                return AddIdentitiesResponse(
                    added=result.added, skipped=result.skipped
                )
