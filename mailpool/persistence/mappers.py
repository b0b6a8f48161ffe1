"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict

from mailpool.domain.model import (
    AuditEntry,
    CardKeyConsumption,
    InviteRedemptionRecord,
    PooledIdentity,
    RedemptionUse,
)
from mailpool.domain.value import (
    CardDuration,
    CardKeyId,
    CardSource,
    IdentityProtocol,
    InviteId,
    PoolTier,
    RegistrationMethod,
    UserId,
)


def row_to_redemption_use(row: Dict[str, Any]) -> RedemptionUse:
    """Convert database row to RedemptionUse domain model.

    Args:
        row: Database row as dict

    Returns:
        RedemptionUse domain model
    """
    return RedemptionUse(
        user_id=UserId(row["user_id"]),
        method=RegistrationMethod(row["method"]),
        timestamp=row["used_at"],
    )


def rows_to_redemption_record(
    invite_id: InviteId, used_count: int, use_rows: list[Dict[str, Any]]
) -> InviteRedemptionRecord:
    """Assemble a redemption record from its header count and use rows.

    Args:
        invite_id: Invite ID
        used_count: Stored used_count
        use_rows: Use rows ordered by seq

    Returns:
        InviteRedemptionRecord domain model
    """
    return InviteRedemptionRecord(
        invite_id=invite_id,
        used_count=used_count,
        used_by=[row_to_redemption_use(row) for row in use_rows],
    )


def redemption_use_to_dict(
    invite_id: InviteId, seq: int, use: RedemptionUse
) -> Dict[str, Any]:
    """Convert a RedemptionUse to a database dict."""
    return {
        "invite_id": invite_id,
        "seq": seq,
        "user_id": use.user_id,
        "method": use.method.value,
        "used_at": use.timestamp,
    }


def row_to_consumption(row: Dict[str, Any]) -> CardKeyConsumption:
    """Convert database row to CardKeyConsumption domain model."""
    return CardKeyConsumption(
        key=CardKeyId(row["key"]),
        user_id=UserId(row["user_id"]),
        consumed_at=row["consumed_at"],
    )


def consumption_to_dict(consumption: CardKeyConsumption) -> Dict[str, Any]:
    """Convert CardKeyConsumption domain model to database dict."""
    return consumption.model_dump()


def row_to_identity(row: Dict[str, Any]) -> PooledIdentity:
    """Convert database row to PooledIdentity domain model.

    Args:
        row: Database row as dict

    Returns:
        PooledIdentity domain model
    """
    return PooledIdentity(
        email=row["email"],
        tier=PoolTier(row["tier"]),
        protocol=IdentityProtocol(row["protocol"]),
        banned=row["banned"],
        assigned_to=UserId(row["assigned_to"]) if row.get("assigned_to") else None,
        assigned_at=row.get("assigned_at"),
    )


def identity_to_dict(identity: PooledIdentity) -> Dict[str, Any]:
    """Convert PooledIdentity domain model to database dict.

    Args:
        identity: PooledIdentity domain model

    Returns:
        Dict suitable for database insertion
    """
    data = identity.model_dump()
    data["tier"] = identity.tier.value
    data["protocol"] = identity.protocol.value
    return data


def row_to_audit_entry(row: Dict[str, Any]) -> AuditEntry:
    """Convert database row to AuditEntry domain model."""
    return AuditEntry(
        subject_key=row["subject_key"],
        user_id=UserId(row["user_id"]),
        verified_at=row["verified_at"],
        email_count=row["email_count"],
        duration=CardDuration(row["duration"]),
        source=CardSource(row["source"]),
        custom_source=row.get("custom_source"),
    )


def audit_entry_to_dict(entry: AuditEntry) -> Dict[str, Any]:
    """Convert AuditEntry domain model to database dict."""
    data = entry.model_dump()
    data["duration"] = entry.duration.value
    data["source"] = entry.source.value
    return data
