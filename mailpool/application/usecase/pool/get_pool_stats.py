"""Get pool stats use case."""

import logfire
from pydantic import BaseModel

from mailpool.application.usecase.base import BaseUseCase
from mailpool.domain.service import ResourcePool


class PoolStatsResponse(BaseModel):
    """Identity counts."""

    total: int
    banned: int
    active: int


class GetPoolStatsUseCase(BaseUseCase):
    """Use case for reading identity counts from the status cache."""

    def __init__(self, resource_pool: ResourcePool) -> None:
        self.resource_pool = resource_pool

    async def execute(self, request: None = None) -> PoolStatsResponse:
        with logfire.span("get_pool_stats.execute"):
            stats = await self.resource_pool.stats()
            return PoolStatsResponse(**stats.model_dump())


class RefreshPoolUseCase(BaseUseCase):
    """Use case for rehydrating the status cache from the store."""

    def __init__(self, resource_pool: ResourcePool) -> None:
        self.resource_pool = resource_pool

    async def execute(self, request: None = None) -> PoolStatsResponse:
        with logfire.span("refresh_pool.execute"):
            stats = await self.resource_pool.refresh()
            return PoolStatsResponse(**stats.model_dump())
