"""
OpenTelemetry log transport.

Entries become OTLP log records and are exported in batches as OTLP/HTTP JSON.
"""

import asyncio
import json
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..entry import TARGET_JSON, Entry
from ..exceptions import DeliveryError
from ..levels import LevelRef
from ..resilience import RetryPolicy
from .batch import BatchingTransport
from .http import HttpClient
from .line_protocol import to_unix_ns

if TYPE_CHECKING:
    from ..manager import LogManager

LOGS_ENDPOINT = "/v1/logs"
SCOPE_NAME = "logflow"


def flatten_data(data: Any, prefix: str = "data") -> Dict[str, Any]:
    """Flatten nested dictionaries into dotted attribute keys; lists become JSON strings."""
    result: Dict[str, Any] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            attr_key = f"{prefix}.{key}"
            if isinstance(value, dict):
                result.update(flatten_data(value, attr_key))
            elif isinstance(value, (list, tuple)):
                result[attr_key] = json.dumps(value, default=str)
            elif value is None or isinstance(value, (str, int, float, bool)):
                result[attr_key] = value
            else:
                result[attr_key] = str(value)
    elif data is None or isinstance(data, (str, int, float, bool)):
        result[prefix] = data
    else:
        result[prefix] = json.dumps(data, default=str)
    return result


def any_value(value: Any) -> Dict[str, Any]:
    """Typed OTLP AnyValue for a primitive."""
    if isinstance(value, bool):
        return {"boolValue": value}
    if isinstance(value, int):
        return {"intValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    return {"stringValue": "" if value is None else str(value)}


class OtlpTransport(BatchingTransport):
    """Batched export of log records to an OTLP/HTTP collector."""

    type = "otlp"

    def __init__(
        self,
        manager: "LogManager",
        endpoint: str = "http://localhost:4318",
        service_name: str = "logflow",
        headers: Optional[Dict[str, str]] = None,
        resource_attributes: Optional[Dict[str, Any]] = None,
        batch_size: int = 100,
        flush_interval: float = 5.0,
        max_buffer: int = 10_000,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 10.0,
        client: Optional[HttpClient] = None,
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
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
        self.endpoint = endpoint
        self.service_name = service_name
        self.resource_attributes = dict(resource_attributes or {})
        self.client = client or HttpClient(endpoint, timeout=timeout, headers=headers)

    def __str__(self) -> str:
        return f"OTLP[{self.endpoint}]"

    def to_log_record(self, entry: Entry) -> Dict[str, Any]:
        """Log record in the OpenTelemetry data model."""
        levels = self._manager.levels
        record: Dict[str, Any] = {
            "timestamp": entry.timestamp,
            "severityText": entry.level,
            "severityNumber": levels.severity_number(entry.level),
        }
        attributes: Dict[str, Any] = {}
        if entry.req_id:
            attributes["request.id"] = entry.req_id
        if entry.sid:
            attributes["session.id"] = entry.sid
        if entry.pkg:
            attributes["code.namespace"] = entry.pkg
        if entry.data is not None and entry.data != {}:
            attributes.update(flatten_data(entry.data))
        if entry.elapsed_ms is not None:
            attributes["event.duration"] = int(round(entry.elapsed_ms * 1_000_000))
        if attributes:
            record["attributes"] = attributes
        record["body"] = entry.render(color=False, target=TARGET_JSON)
        return record

    def format_record(self, entry: Entry) -> Dict[str, Any]:
        record = self.to_log_record(entry)
        encoded: Dict[str, Any] = {
            "timeUnixNano": str(to_unix_ns(record["timestamp"])),
            "severityText": record["severityText"],
            "severityNumber": record["severityNumber"],
            "body": {"stringValue": record["body"]},
        }
        if "attributes" in record:
            encoded["attributes"] = [
                {"key": key, "value": any_value(value)} for key, value in record["attributes"].items()
            ]
        return encoded

    def build_payload(self, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """ExportLogsServiceRequest body for a batch of encoded records."""
        resource = {"service.name": self.service_name, **self.resource_attributes}
        return {
            "resourceLogs": [
                {
                    "resource": {
                        "attributes": [{"key": k, "value": any_value(v)} for k, v in resource.items()]
                    },
                    "scopeLogs": [{"scope": {"name": SCOPE_NAME}, "logRecords": list(records)}],
                }
            ]
        }

    async def _transmit(self, records: List[Any]) -> None:
        response = await asyncio.to_thread(
            self.client.post,
            LOGS_ENDPOINT,
            json=self.build_payload(records),
            timeout=self.timeout,
        )
        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                str(self),
                f"OTLP export failed [{response.status_code}]: {response.text[:200]}",
                status_code=response.status_code,
            )

    async def _close(self) -> None:
        self.client.close()
