"""Save/delete state machine for records.

A record is clean (no pending operations), dirty, syncing (a transition
holds its lock) or deleted (id dropped after a successful delete). Every
transition of one record runs under that record's lock, network call
included, so two saves of the same unsaved record can never both create it.
Different records never contend.
"""

import logging
from datetime import datetime
from typing import Any

from ..codec import parse_date
from ..errors import MalformedResponseError, OTHER_CAUSE, ServerError
from ..records import Record
from .transport import Response, Transport

logger = logging.getLogger(__name__)

FIELD_OBJECT_ID = "objectId"
FIELD_CREATED_AT = "createdAt"
FIELD_UPDATED_AT = "updatedAt"


class SyncEngine:
    """Drives create, update and delete round trips through a transport."""

    def __init__(self, transport: Transport):
        self.transport = transport

    def save(self, record: Record) -> None:
        """Send the record's pending changes.

        Creates the record (POST to its endpoint) when it has no id yet,
        updates it (PUT to endpoint/id) otherwise. A clean record is left
        alone without touching the network.

        Raises:
            TransportError: The request could not be completed.
            ServerError: The backend rejected the request.
            MalformedResponseError: The backend reported success but the
                response lacks the id or timestamps.

        On any error the record is left exactly as it was.
        """
        with record.lock:
            if not record.is_dirty:
                return

            creating = record.object_id is None
            if creating:
                method, path = "POST", record.endpoint
            else:
                method, path = "PUT", f"{record.endpoint}/{record.object_id}"

            payload = record.pending_payload()
            logger.debug(f"Saving {record.collection_name}: {method} {path} {payload}")

            body = self._expect_body(self.transport.perform(method, path, payload), method, path)

            if creating:
                object_id = _read_field(body, FIELD_OBJECT_ID)
                if not isinstance(object_id, str) or not object_id:
                    raise MalformedResponseError(
                        "Although the server reports the object saved, "
                        "the response has no objectId."
                    )
                created_at = _read_date_field(body, FIELD_CREATED_AT)
                record._commit_save(object_id, created_at, created_at)
                logger.info(f"Created {record.collection_name}/{object_id}")
            else:
                updated_at = _read_date_field(body, FIELD_UPDATED_AT)
                record._commit_save(record.object_id, None, updated_at)
                logger.debug(f"Updated {record.collection_name}/{record.object_id}")

    def delete(self, record: Record) -> None:
        """Delete the record's server copy.

        A record that was never saved is left alone. On success the id and
        timestamps are cleared along with pending operations; local data is
        kept so the record can be saved again as a new document.

        Raises:
            TransportError: The request could not be completed.
            ServerError: The backend rejected the request.
        """
        with record.lock:
            if record.object_id is None:
                return

            object_id = record.object_id
            path = f"{record.endpoint}/{object_id}"
            response = self.transport.perform("DELETE", path, None)
            if not response.succeeded:
                logger.warning(f"DELETE {path} failed: {response.error}")
                raise response.error or ServerError(OTHER_CAUSE, f"DELETE {path} failed.")

            record._commit_delete()
            logger.info(f"Deleted {record.collection_name}/{object_id}")

    @staticmethod
    def _expect_body(response: Response, method: str, path: str) -> dict[str, Any]:
        if not response.succeeded:
            logger.warning(f"{method} {path} failed: {response.error}")
            raise response.error or ServerError(OTHER_CAUSE, f"{method} {path} failed.")
        if response.body is None:
            raise response.error or MalformedResponseError(
                f"Response to {method} {path} has no body."
            )
        return response.body


def _read_field(body: dict[str, Any], name: str) -> Any:
    if name not in body:
        raise MalformedResponseError(
            f"Although the server reports the object saved, the response has no {name}."
        )
    return body[name]


def _read_date_field(body: dict[str, Any], name: str) -> datetime:
    value = _read_field(body, name)
    try:
        return parse_date(value)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"Although the server reports the object saved, {name} is invalid: {value!r}"
        ) from e
