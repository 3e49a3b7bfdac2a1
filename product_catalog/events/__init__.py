"""
Product domain events: message payloads, bus backends and the publisher.
"""

from .bus import InMemoryMessageBus, MessageBus, RedisMessageBus
from .publisher import PRODUCTS_PRODUCT_REFRESHED, PRODUCTS_PRODUCT_UPDATED, EventPublisher

__all__ = [
    "EventPublisher",
    "InMemoryMessageBus",
    "MessageBus",
    "RedisMessageBus",
    "PRODUCTS_PRODUCT_REFRESHED",
    "PRODUCTS_PRODUCT_UPDATED",
]
