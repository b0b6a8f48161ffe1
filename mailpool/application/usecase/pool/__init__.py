"""Pooled identity use cases."""

from mailpool.application.usecase.pool.add_identities import (
    AddIdentitiesRequest,
    AddIdentitiesResponse,
    AddIdentitiesUseCase,
    IdentityInput,
)
from mailpool.application.usecase.pool.get_pool_stats import (
    GetPoolStatsUseCase,
    PoolStatsResponse,
    RefreshPoolUseCase,
)
from mailpool.application.usecase.pool.update_identity_status import (
    UpdateIdentityStatusRequest,
    UpdateIdentityStatusResponse,
    UpdateIdentityStatusUseCase,
)

__all__ = [
    "AddIdentitiesRequest",
    "AddIdentitiesResponse",
    "AddIdentitiesUseCase",
    "GetPoolStatsUseCase",
    "IdentityInput",
    "PoolStatsResponse",
    "RefreshPoolUseCase",
    "UpdateIdentityStatusRequest",
    "UpdateIdentityStatusResponse",
    "UpdateIdentityStatusUseCase",
]
