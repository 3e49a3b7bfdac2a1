"""
Message bus backends.

Every backend exposes `publish(topic, payload)` where payload is an already
serialized JSON string. The Redis backend publishes on a pub/sub channel named
after the topic; the in-memory backend keeps what it was given so local runs
and tests can inspect it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import redis

logger = logging.getLogger(__name__)


class MessageBus(ABC):
    @abstractmethod
    def publish(self, topic: str, payload: str) -> None:
        """Deliver one payload to every subscriber of `topic`."""


@dataclass
class PublishedMessage:
    topic: str
    payload: str


class InMemoryMessageBus(MessageBus):
    def __init__(self) -> None:
        self.published: List[PublishedMessage] = []

    def publish(self, topic: str, payload: str) -> None:
        self.published.append(PublishedMessage(topic=topic, payload=payload))
        logger.debug("Recorded message on %s (%d bytes)", topic, len(payload))

    def on_topic(self, topic: str) -> List[str]:
        return [m.payload for m in self.published if m.topic == topic]


class RedisMessageBus(MessageBus):
    def __init__(self, url: Optional[str] = None, client=None) -> None:
        if client is None and not url:
            raise ValueError("RedisMessageBus needs a redis url or a client")
        self._client = client or redis.from_url(url, decode_responses=True)

    def publish(self, topic: str, payload: str) -> None:
        receivers = self._client.publish(topic, payload)
        if not receivers:
            logger.warning("Published on %s but no subscriber was listening", topic)
        else:
            logger.info("Published on %s to %d subscriber(s)", topic, receivers)
