"""
InfluxDB transport.

Entries become line protocol records in the ``logs`` measurement and are
written in batches to the InfluxDB v2 write API.
"""

import asyncio
import json
import socket
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..entry import TARGET_JSON, Entry
from ..exceptions import DeliveryError, InvalidConfigurationError
from ..levels import LevelRef
from ..resilience import RetryPolicy
from .batch import BatchingTransport
from .http import HttpClient
from .line_protocol import format_line, to_unix_ns

if TYPE_CHECKING:
    from ..manager import LogManager

WRITE_ENDPOINT = "/api/v2/write"


class InfluxTransport(BatchingTransport):
    """Batched delivery to InfluxDB using the line protocol.

    Tags: severity, service, environment, host, pkg, sid, req_id.
    Fields: body, ``data_<key>`` per top-level data key, duration_ns.
    """

    type = "influx"

    def __init__(
        self,
        manager: "LogManager",
        url: str,
        org: str,
        bucket: str,
        token: Optional[str] = None,
        service: Optional[str] = None,
        environment: Optional[str] = None,
        hostname: Optional[str] = None,
        measurement: str = "logs",
        batch_size: int = 100,
        flush_interval: float = 5.0,
        max_buffer: int = 10_000,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 10.0,
        client: Optional[HttpClient] = None,
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        if not url:
            raise InvalidConfigurationError("url", url, "an InfluxDB base URL")
        super().__init__(
            manager,
            batch_size=batch_size,
            flush_interval=flush_interval,
            max_buffer=max_buffer,
            retry_policy=retry_policy,
            timeout=timeout,
            threshold=threshold,
            show=show,
        )
        self.url = url
        self.org = org
        self.bucket = bucket
        self.token = token
        self.service = service
        self.environment = environment
        self.hostname = hostname or socket.gethostname()
        self.measurement = measurement
        self.client = client or HttpClient(url, timeout=timeout)

    def __str__(self) -> str:
        return f"Influx[{self.url}/{self.org}/{self.bucket}]"

    def format_record(self, entry: Entry) -> str:
        tags = {
            "severity": entry.level,
            "service": self.service,
            "environment": self.environment,
            "host": self.hostname,
            "pkg": entry.pkg,
            "sid": entry.sid,
            "req_id": entry.req_id,
        }
        fields: Dict[str, Any] = {"body": entry.render(color=False, target=TARGET_JSON)}
        if isinstance(entry.data, dict):
            for key, value in entry.data.items():
                if value is None:
                    continue
                if not isinstance(value, (str, int, float, bool)):
                    value = json.dumps(value, default=str)
                fields[f"data_{key}"] = value
        if entry.elapsed_ms is not None:
            fields["duration_ns"] = int(round(entry.elapsed_ms * 1_000_000))
        return format_line(self.measurement, tags, fields, to_unix_ns(entry.timestamp))

    async def _transmit(self, records: List[Any]) -> None:
        headers = {"Content-Type": "text/plain; charset=utf-8"}
        if self.token:
            headers["Authorization"] = f"Token {self.token}"
        response = await asyncio.to_thread(
            self.client.post,
            WRITE_ENDPOINT,
            data="\n".join(records).encode("utf-8"),
            params={"org": self.org, "bucket": self.bucket, "precision": "ns"},
            headers=headers,
            timeout=self.timeout,
        )
        if response.status_code != 204:
            raise DeliveryError(
                str(self),
                f"InfluxDB write failed [{response.status_code}]: {response.text[:200]}",
                status_code=response.status_code,
            )

    async def _close(self) -> None:
        self.client.close()
