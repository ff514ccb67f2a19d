"""Pushes decoded messages to a message queue back end."""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, runtime_checkable

from vflow.producer.raw_socket import RawSocket

_CLOSED = object()


@runtime_checkable
class MQueue(Protocol):
    """A message queue back end."""

    def setup(self, config_file: str, logger: Optional[logging.Logger]) -> None:
        """Configure and connect; raises on failure."""
        ...

    def input_messages(self, topic: str, messages: Iterable[bytes]) -> int:
        """Publish messages until the iterable ends; returns the error count."""
        ...


_REGISTERED = {
    "rawSocket": RawSocket,
}


@dataclass
class Producer:
    """Feeds messages put on ``chan`` to a message queue back end."""

    mq: MQueue
    mq_config_file: str = ""
    mq_error_count: int = 0
    topic: str = ""
    chan: "queue.Queue" = field(default_factory=queue.Queue)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("vflow.producer")
    )

    def run(self) -> None:
        """Set up the back end and publish until the producer is shut down."""
        self.mq.setup(self.mq_config_file, self.logger)
        messages = iter(self.chan.get, _CLOSED)
        self.mq_error_count += self.mq.input_messages(self.topic, messages)

    def shutdown(self) -> None:
        """Close the channel; ``run`` returns once queued messages are sent."""
        self.chan.put(_CLOSED)


def new_producer(name: str) -> Producer:
    """Build a producer for the named message queue back end."""
    try:
        mq_cls = _REGISTERED[name]
    except KeyError:
        raise ValueError(f"unknown message queue {name!r}") from None
    return Producer(mq=mq_cls())