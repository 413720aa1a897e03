"""
Storage layer for team authorization records.

Uses a DynamoDB table keyed by `id` (the Slack team id).
"""

import logging
from functools import cached_property
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings
from .errors import StorageError

logger = logging.getLogger(__name__)


def resolve_record_id(record: dict[str, Any]) -> Optional[str]:
    """Identity key for a record: `id`, then `team_id`, then `team.id`."""
    if record.get("id"):
        return record["id"]
    if record.get("team_id"):
        return record["team_id"]
    team = record.get("team")
    if isinstance(team, dict):
        return team.get("id")
    return None


class DynamoStorage:
    """Reads and writes records in one DynamoDB table."""

    def __init__(
        self,
        table_name: str,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        table: Any = None,
    ):
        self.table_name = table_name
        self.endpoint_url = endpoint_url
        self.region = region
        if table is not None:
            self.__dict__["table"] = table

    @cached_property
    def table(self):
        """DynamoDB table, created on first use."""
        if self.endpoint_url:
            # Local DynamoDB for offline runs
            resource = boto3.resource(
                "dynamodb",
                region_name=self.region or "localhost",
                endpoint_url=self.endpoint_url,
            )
        else:
            resource = boto3.resource("dynamodb", region_name=self.region)
        return resource.Table(self.table_name)

    def get(self, id: Optional[str]) -> Optional[dict[str, Any]]:
        """Get a record by id, or None if there is none."""
        if not id:
            logger.debug("No record id given, skipping lookup")
            return None
        try:
            response = self.table.get_item(Key={"id": id})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get record {id} from {self.table_name}: {e}")
            raise StorageError(f"Failed to get record {id}: {e}") from e
        return response.get("Item")

    def save(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Save a record, overwriting any record with the same id.

        The id is derived from the record itself and written back to `id`.

        Returns:
            The saved record
        """
        record_id = resolve_record_id(record)
        if not record_id:
            raise StorageError("Record has no id, team_id or team.id")

        record = {**record, "id": record_id}
        try:
            self.table.put_item(Item=record)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to save record {record_id} to {self.table_name}: {e}")
            raise StorageError(f"Failed to save record {record_id}: {e}") from e

        logger.info(f"Saved record {record_id}")
        return record


def configure_storage(settings: Settings) -> DynamoStorage:
    """Create storage from settings. The local endpoint only applies offline."""
    endpoint_url = settings.dynamodb_endpoint if settings.is_offline else None
    logger.info(
        f"Storage configured: table={settings.table_name} offline={settings.is_offline}"
    )
    return DynamoStorage(
        settings.table_name,
        endpoint_url=endpoint_url,
        region=settings.region,
    )
