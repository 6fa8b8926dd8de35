# messaging/event_publisher.py

import logging
from django.conf import settings
from .rabbitmq_client import rabbitmq_client

logger = logging.getLogger(__name__)


class SOHEventPublisher:
    """Announces SOH data reference lifecycle events on the SOH topic exchange."""

    def publish_reference_completed(self, *, reference_id, project_id, filename: str, row_count: int, uploaded_by: str):
        payload = {
            "soh_data_reference_id": str(reference_id),
            "project_id": str(project_id),
            "filename": filename,
            "row_count": row_count,
            "uploaded_by": uploaded_by,
        }
        logger.info(f"Publishing SOH completion for reference {reference_id} ({row_count} rows).")
        self._publish("soh.reference.completed", payload)

    def publish_reference_deleted(self, *, reference_id, project_id, filename: str, items_deleted: int):
        payload = {
            "soh_data_reference_id": str(reference_id),
            "project_id": str(project_id),
            "filename": filename,
            "items_deleted": items_deleted,
        }
        logger.info(f"Publishing SOH deletion for reference {reference_id} ({items_deleted} items).")
        self._publish("soh.reference.deleted", payload)

    def _publish(self, routing_key, payload):
        rabbitmq_client.publish(
            exchange_name=settings.SOH_EVENTS_EXCHANGE,
            routing_key=routing_key,
            body=payload,
            exchange_type='topic'
        )


# Create a single instance for the application to use
soh_event_publisher = SOHEventPublisher()
