"""Update identity status use case."""

import logfire
from pydantic import BaseModel

from mailpool.application.usecase.base import TransactionalUseCase
from mailpool.domain.error import NotFoundError
from mailpool.domain.repository import Transaction
from mailpool.domain.service import ResourcePool


class UpdateIdentityStatusRequest(BaseModel):
    """Ban or unban an identity."""

    email: str
    banned: bool


class UpdateIdentityStatusResponse(BaseModel):
    """Status after the update."""

    email: str
    banned: bool


class UpdateIdentityStatusUseCase(TransactionalUseCase):
    """Use case for banning and unbanning pooled identities."""

    def __init__(self, resource_pool: ResourcePool, transaction: Transaction) -> None:
        super().__init__(transaction)
        self.resource_pool = resource_pool

    async def execute(
        self, request: UpdateIdentityStatusRequest
    ) -> UpdateIdentityStatusResponse:
        """Update the ban status.

        Raises:
            NotFoundError: If the identity is not in the pool
        """
        email = request.email.strip().lower()
        with logfire.span(
            "update_identity_status.execute", email=email, banned=request.banned
        ):
            async with self.atomic():
                if not await self.resource_pool.upsert_status(email, request.banned):
                    raise NotFoundError("Identity not found")
                return UpdateIdentityStatusResponse(email=email, banned=request.banned)
