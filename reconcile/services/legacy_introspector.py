"""
Read-side introspection of the legacy metadata store.

The legacy system keeps every typed field value as a node linked to
resources through a junction table, so a resource's metadata has to be
reassembled with a three-way join. Field titles are not interpreted here.
"""
import re
from typing import Any, Callable, Iterable, List, Optional

import pymysql

from reconcile.core.config import settings
from reconcile.core.exceptions import LegacyConfigurationError
from reconcile.core.logging_config import LogCategory, log_error, log_info, log_warning
from reconcile.schemas.legacy import LegacyFieldRecord, LegacyLookup, LegacyStatus

LEGACY_FIELDS_QUERY = """
    SELECT n.resource_type_field AS field_id,
           f.title AS field_title,
           n.name AS value
    FROM node n
    JOIN resource_node rn ON n.ref = rn.node
    JOIN resource_type_field f ON n.resource_type_field = f.ref
    WHERE rn.resource = %s
    ORDER BY n.resource_type_field, n.ref
"""

MIGRATED_FILENAME_PATTERN = re.compile(r"(\d+)_")


def _get_legacy_connection() -> pymysql.Connection:
    """Create a new read-only connection to the legacy MySQL store (one per call)."""
    if not settings.legacy_db_host or not settings.legacy_db_name:
        raise LegacyConfigurationError("LEGACY_DB_HOST and LEGACY_DB_NAME must be set")
    return pymysql.connect(
        host=settings.legacy_db_host,
        port=settings.legacy_db_port,
        user=settings.legacy_db_user,
        password=settings.legacy_db_password or "",
        database=settings.legacy_db_name,
        cursorclass=pymysql.cursors.DictCursor,
        charset="utf8mb4",
        connect_timeout=settings.legacy_db_connect_timeout,
    )


def legacy_id_from_filename(filename: str, prefix: Optional[str] = None) -> Optional[int]:
    """
    Recover the legacy resource id from a migrated asset filename.

    Migrated files are stored as ``<prefix><legacy id>_<name>``,
    e.g. ``migration/634_sunset.jpg`` -> 634.
    """
    prefix = prefix if prefix is not None else settings.migrated_filename_prefix
    if not filename or not filename.startswith(prefix):
        return None
    match = MIGRATED_FILENAME_PATTERN.match(filename[len(prefix):])
    return int(match.group(1)) if match else None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class LegacySchemaIntrospector:
    """
    Reconstruct the field values of legacy resources.

    Each lookup acquires its own connection and always releases it; a failed
    lookup is reported, never raised, so a batch over many ids keeps going.
    """

    def __init__(self, connect: Callable[[], Any] = _get_legacy_connection):
        self._connect = connect

    def introspect(self, resource_id: int) -> LegacyLookup:
        connection = None
        try:
            connection = self._connect()
            with connection.cursor() as cursor:
                cursor.execute(LEGACY_FIELDS_QUERY, (resource_id,))
                rows = cursor.fetchall()
        except Exception as exc:
            log_error(exc, resource_id=resource_id)
            return LegacyLookup(resource_id=resource_id, status=LegacyStatus.FAILED, error=str(exc))
        finally:
            if connection is not None:
                try:
                    connection.close()
                except Exception as exc:
                    log_warning(
                        f"Failed to close legacy connection: {exc}",
                        category=LogCategory.LEGACY,
                        resource_id=resource_id,
                    )

        if not rows:
            log_info("No legacy data found", category=LogCategory.LEGACY, resource_id=resource_id)
            return LegacyLookup(resource_id=resource_id, status=LegacyStatus.NOT_FOUND)

        records = [
            LegacyFieldRecord(
                field_id=int(row["field_id"]),
                field_title=_as_text(row["field_title"]) or f"field_{row['field_id']}",
                value=_as_text(row["value"]),
            )
            for row in rows
        ]
        log_info(
            f"Found {len(records)} legacy field values",
            category=LogCategory.LEGACY,
            resource_id=resource_id,
        )
        return LegacyLookup(resource_id=resource_id, status=LegacyStatus.FOUND, records=records)

    def introspect_many(self, resource_ids: Iterable[int]) -> List[LegacyLookup]:
        return [self.introspect(resource_id) for resource_id in resource_ids]
