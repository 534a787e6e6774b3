"""
Telemetry sinks: where serialized readings go besides the console.

- NullSink: remote delivery disabled
- HttpSink: one JSON POST per reading
- KafkaSink: one keyed JSON message per reading
"""

import json
import logging
from typing import Dict, Optional

import requests
from kafka import KafkaProducer
from kafka.errors import KafkaError

logger = logging.getLogger(__name__)


class SinkDeliveryError(Exception):
    """A reading could not be delivered to the external sink."""


class TelemetrySink:
    """Base class for telemetry sinks"""

    name = 'base'

    def deliver(self, reading: Dict, device_name: str):
        """Deliver one serialized reading; raise SinkDeliveryError on failure"""
        raise NotImplementedError

    def close(self):
        pass


class NullSink(TelemetrySink):
    """Discards everything."""

    name = 'none'

    def deliver(self, reading: Dict, device_name: str):
        pass


class HttpSink(TelemetrySink):
    """POSTs each reading as JSON to a collector endpoint."""

    name = 'http'

    def __init__(self, url: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        logger.info(f"HTTP sink initialized: {url} (timeout={timeout}s)")

    def deliver(self, reading: Dict, device_name: str):
        try:
            response = self.session.post(self.url, json=reading, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SinkDeliveryError(str(e)) from e
        logger.info(f"Data for {device_name} sent successfully")

    def close(self):
        self.session.close()


class KafkaSink(TelemetrySink):
    """Publishes each reading to a Kafka topic, keyed by system id."""

    name = 'kafka'

    def __init__(
        self,
        bootstrap_servers: str = 'localhost:9092',
        topic: str = 'hvac-telemetry',
        send_timeout: float = 10.0,
        producer: Optional[KafkaProducer] = None
    ):
        """
        Initialize Kafka sink.

        Args:
            bootstrap_servers: Kafka broker address
            topic: Topic to publish readings to
            send_timeout: Seconds to wait for the broker to acknowledge a reading
            producer: Pre-built producer (a new one is created if omitted)
        """
        self.topic = topic
        self.send_timeout = send_timeout
        self.producer = producer or KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            value_serializer=lambda v: json.dumps(v).encode('utf-8'),
            key_serializer=lambda k: k.encode('utf-8') if k else None,
            acks='all',
            compression_type='gzip',
        )
        logger.info(f"Kafka sink initialized: {bootstrap_servers}, topic={topic}")

    def deliver(self, reading: Dict, device_name: str):
        try:
            # Wait for the ack so deliveries stay sequential in fleet order
            future = self.producer.send(
                self.topic,
                key=reading.get('system_id'),
                value=reading
            )
            future.get(timeout=self.send_timeout)
        except KafkaError as e:
            raise SinkDeliveryError(str(e)) from e
        logger.info(f"Data for {device_name} sent successfully")

    def close(self):
        logger.info("Flushing and closing Kafka producer...")
        self.producer.flush()
        self.producer.close()
