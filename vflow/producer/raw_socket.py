"""Producer that writes messages, one per line, to a TCP or UDP socket."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from typing import Iterable, Optional

import yaml

_LOG = logging.getLogger(__name__)


@dataclass
class RawSocketConfig:
    """Where and how to send messages."""

    url: str = "localhost:9555"
    protocol: str = "tcp"
    max_retry: int = 2

    @classmethod
    def load(cls, path: str) -> "RawSocketConfig":
        """Read a YAML file over the defaults; raises on unreadable input."""
        with open(path, "rb") as fh:
            data = yaml.safe_load(fh)
        config = cls()
        if isinstance(data, dict):
            if "url" in data:
                config.url = str(data["url"])
            if "protocol" in data:
                config.protocol = str(data["protocol"])
            if "retry-max" in data:
                config.max_retry = int(data["retry-max"])
        return config


def _split_host_port(url: str) -> tuple:
    host, sep, port = url.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {url!r}")
    return host.strip("[]") or "localhost", int(port)


@dataclass
class RawSocket:
    """Sends each message followed by a newline over a raw socket."""

    config: RawSocketConfig = field(default_factory=RawSocketConfig)
    connection: Optional[socket.socket] = None
    logger: logging.Logger = _LOG

    def _dial(self) -> socket.socket:
        host, port = _split_host_port(self.config.url)
        protocol = self.config.protocol.lower()
        if protocol.startswith("tcp"):
            return socket.create_connection((host, port))
        if protocol.startswith("udp"):
            family, kind, proto, _, addr = socket.getaddrinfo(
                host, port, type=socket.SOCK_DGRAM
            )[0]
            sock = socket.socket(family, kind, proto)
            sock.connect(addr)
            return sock
        raise ValueError(f"unknown network {self.config.protocol!r}")

    def setup(self, config_file: str, logger: Optional[logging.Logger] = None) -> None:
        """Load the configuration file and connect to the configured address."""
        log = logger or self.logger
        try:
            self.config = RawSocketConfig.load(config_file)
            self.connection = self._dial()
        except Exception as exc:
            log.error("%s", exc)
            raise
        self.logger = log

    def input_messages(self, topic: str, messages: Iterable[bytes]) -> int:
        """Send every message; returns the number of failed writes."""
        errors = 0
        self.logger.info(
            "start producer: RawSocket, server: %s, Protocol: %s",
            self.config.url,
            self.config.protocol,
        )
        for msg in messages:
            payload = bytes(msg) + b"\n"
            attempt = 0
            while True:
                try:
                    if self.connection is None:
                        raise BrokenPipeError("broken pipe")
                    self.connection.sendall(payload)
                    break
                except OSError as err:
                    errors += 1
                    if isinstance(err, BrokenPipeError) or str(err).endswith(
                        "broken pipe"
                    ):
                        try:
                            self.connection = self._dial()
                        except OSError as dial_err:
                            self.logger.error(
                                "Error when attempting to fix the broken pipe %s",
                                dial_err,
                            )
                        else:
                            self.logger.info("Successfully reconnected")
                    if attempt >= self.config.max_retry:
                        self.logger.error(
                            "message failed after the configured retry limit: %s", err
                        )
                        break
                    self.logger.warning("retrying after error: %s", err)
                    attempt += 1
        return errors