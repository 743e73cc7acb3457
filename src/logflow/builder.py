"""
Build a LogManager and its transports from configuration.
"""

import logging
from typing import Optional

from .config import LoggingConfig, NetworkTransportConfig
from .manager import LogManager
from .resilience import RetryPolicy
from .transports import ConsoleTransport, FileTransport, InfluxTransport, OtlpTransport

logger = logging.getLogger(__name__)


def _retry_policy(config: NetworkTransportConfig) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=config.max_attempts,
        base_delay=config.base_delay,
        max_delay=config.max_delay,
    )


def create_log_manager(config: Optional[LoggingConfig] = None) -> LogManager:
    """Create a LogManager with every enabled transport registered.

    The manager is not started; call ``await manager.start()`` or
    ``manager.get_logger()``.
    """
    config = config or LoggingConfig()
    manager = LogManager(
        levels=config.levels,
        threshold=config.threshold,
        show=config.show.model_dump(),
    )
    transports = config.transports

    if transports.console.enabled:
        manager.add_transport(
            ConsoleTransport(
                manager,
                format=transports.console.format,
                color=transports.console.color,
                use_stderr=transports.console.use_stderr,
                threshold=transports.console.threshold,
            )
        )

    if transports.file.enabled:
        manager.add_transport(
            FileTransport(
                manager,
                path=transports.file.path,
                mode=transports.file.mode,
                buffer_size=transports.file.buffer_size,
                max_bytes=transports.file.max_bytes,
                backup_count=transports.file.backup_count,
                format=transports.file.format,
                color=transports.file.color,
                threshold=transports.file.threshold,
            )
        )

    if transports.influx.enabled:
        influx = transports.influx
        manager.add_transport(
            InfluxTransport(
                manager,
                url=influx.url,
                org=influx.org,
                bucket=influx.bucket,
                token=influx.token,
                service=influx.service,
                environment=influx.environment,
                hostname=influx.hostname,
                measurement=influx.measurement,
                batch_size=influx.batch_size,
                flush_interval=influx.flush_interval,
                max_buffer=influx.max_buffer,
                retry_policy=_retry_policy(influx),
                timeout=influx.timeout,
                threshold=influx.threshold,
            )
        )

    if transports.otlp.enabled:
        otlp = transports.otlp
        manager.add_transport(
            OtlpTransport(
                manager,
                endpoint=otlp.endpoint,
                service_name=otlp.service_name,
                headers=otlp.headers,
                batch_size=otlp.batch_size,
                flush_interval=otlp.flush_interval,
                max_buffer=otlp.max_buffer,
                retry_policy=_retry_policy(otlp),
                timeout=otlp.timeout,
                threshold=otlp.threshold,
            )
        )

    logger.debug(f"Created {manager!r}")
    return manager
