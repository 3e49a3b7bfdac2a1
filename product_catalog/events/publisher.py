"""
Event publisher for product change notifications.
"""

import json
import logging
from typing import Sequence

from product_catalog.error_handler import EventPublishError
from product_catalog.events.bus import MessageBus
from product_catalog.events.messages import ProductRefreshedMessage, ProductUpdatedMessage

logger = logging.getLogger(__name__)

PRODUCTS_PRODUCT_UPDATED = "products.product.updated"
PRODUCTS_PRODUCT_REFRESHED = "products.product.refreshed"


class EventPublisher:
    def __init__(
        self,
        bus: MessageBus,
        updated_topic: str = PRODUCTS_PRODUCT_UPDATED,
        refreshed_topic: str = PRODUCTS_PRODUCT_REFRESHED,
    ):
        self.bus = bus
        self.updated_topic = updated_topic
        self.refreshed_topic = refreshed_topic

    def publish_product_updated(self, message: ProductUpdatedMessage) -> None:
        self._publish(self.updated_topic, message.model_dump_json())
        logger.info("Published product updated event for product %s", message.product_id)

    def publish_products_refreshed(self, messages: Sequence[ProductRefreshedMessage]) -> None:
        """One publish per refresh: a JSON array of individually serialized messages."""
        if not messages:
            return
        payload = json.dumps([m.model_dump_json() for m in messages])
        self._publish(self.refreshed_topic, payload)
        logger.info("Published product refreshed event covering %d products", len(messages))

    def _publish(self, topic: str, payload: str) -> None:
        try:
            self.bus.publish(topic, payload)
        except Exception as exc:
            logger.error("Publishing to %s failed: %s", topic, exc, exc_info=True)
            raise EventPublishError(f"Failed to publish event on {topic}") from exc
