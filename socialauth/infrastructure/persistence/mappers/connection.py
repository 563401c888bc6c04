from datetime import UTC, datetime
from typing import Any

from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionData, UserId


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on read
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def row_to_connection(row: dict[str, Any]) -> Connection:
    """Convert database row to Connection."""
    return Connection(
        data=ConnectionData(
            provider_id=row["provider_id"],
            provider_user_id=row["provider_user_id"],
            display_name=row.get("display_name"),
            profile_url=row.get("profile_url"),
            image_url=row.get("image_url"),
            access_token=row.get("access_token"),
            secret=row.get("secret"),
            refresh_token=row.get("refresh_token"),
            expire_time=_as_utc(row.get("expire_time")),
        ),
        created_at=_as_utc(row["created_at"]),
    )


def connection_data_to_dict(data: ConnectionData) -> dict[str, Any]:
    """Profile and credential columns of a connection."""
    return {
        "display_name": data.display_name,
        "profile_url": data.profile_url,
        "image_url": data.image_url,
        "access_token": data.access_token,
        "secret": data.secret,
        "refresh_token": data.refresh_token,
        "expire_time": data.expire_time,
    }


def connection_to_dict(user_id: UserId, connection: Connection, rank: int) -> dict[str, Any]:
    """Convert Connection to database dict."""
    return {
        "user_id": str(user_id),
        "provider_id": connection.data.provider_id,
        "provider_user_id": connection.data.provider_user_id,
        "rank": rank,
        **connection_data_to_dict(connection.data),
        "created_at": connection.created_at,
    }
