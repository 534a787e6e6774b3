#!/usr/bin/env python3
"""
Reporting loop that generates telemetry for an HVAC fleet on a fixed interval
and writes it to the console and an optional external sink.

Usage:
    python -m hvac_simulator.reporter --fleet-size 10 --interval-ms 5000 --max-cycles 3
    python -m hvac_simulator.reporter --api-endpoint http://localhost:8000/telemetry --forever
    python -m hvac_simulator.reporter --sink kafka --kafka-broker localhost:9092 --topic hvac-telemetry
"""

import argparse
import json
import logging
import random
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, TextIO
from kafka.errors import KafkaError

from hvac_simulator.config import SINK_CHOICES, ConfigError, SimulatorConfig, load_config
from hvac_simulator.hvac_simulator import Device, TelemetryReading, generate_fleet, generate_telemetry
from hvac_simulator.sinks import HttpSink, KafkaSink, NullSink, SinkDeliveryError, TelemetrySink

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

IDLE_WAITING = 'idle_waiting'
REPORTING = 'reporting'
TERMINATED = 'terminated'


@dataclass
class LoopState:
    """Mutable state owned by one ReportingLoop"""
    status: str = IDLE_WAITING
    cycle: int = 0  # completed reporting passes
    readings_generated: int = 0
    delivery_failures: int = 0


class ReportingLoop:
    """Emits one reading per device per cycle, on a fixed-rate schedule."""

    def __init__(
        self,
        fleet: List[Device],
        interval: float = 60.0,
        max_cycles: Optional[int] = 60,
        sink: Optional[TelemetrySink] = None,
        rng: Optional[random.Random] = None,
        out: Optional[TextIO] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize reporting loop.

        Args:
            fleet: Devices to report for, in reporting order
            interval: Seconds between reporting cycles
            max_cycles: Stop after this many cycles (None = run until interrupted)
            sink: External sink (NullSink if omitted)
            rng: Random source for telemetry generation
            out: Console stream (stdout if omitted)
            clock: Monotonic time source
            sleep: Blocking wait used between cycles
        """
        self.fleet = fleet
        self.interval = interval
        self.max_cycles = max_cycles
        self.sink = sink or NullSink()
        self.rng = rng or random.Random()
        self.out = out if out is not None else sys.stdout
        self.clock = clock
        self.sleep = sleep
        self.state = LoopState()

    def _limit_reached(self) -> bool:
        return self.max_cycles is not None and self.state.cycle >= self.max_cycles

    def _emit(self, line: str):
        print(line, file=self.out)
        self.out.flush()

    def report_cycle(self) -> List[TelemetryReading]:
        """Generate, print and deliver one reading for every device in fleet order."""
        self.state.status = REPORTING
        cycle_number = self.state.cycle + 1
        self._emit(f"\n=== Reporting cycle {cycle_number} ({datetime.now(timezone.utc).isoformat()}) ===")

        readings = []
        for device in self.fleet:
            reading = generate_telemetry(device, self.rng)
            self.state.readings_generated += 1
            readings.append(reading)

            payload = reading.to_dict()
            self._emit(f"[{reading.timestamp.isoformat()}] Reporting for {device.name}:")
            self._emit(json.dumps(payload, indent=2))

            try:
                self.sink.deliver(payload, device.name)
            except SinkDeliveryError as e:
                self.state.delivery_failures += 1
                logger.warning(f"Failed to send data for {device.name}: {e}")

        self.state.cycle += 1
        self.state.status = IDLE_WAITING
        return readings

    def run(self) -> int:
        """
        Run until the cycle limit is reached or the operator interrupts.

        Returns:
            Process exit status (always 0)
        """
        logger.info(f"Simulation started. Systems will report every {self.interval:g} seconds.")
        self.state.status = IDLE_WAITING
        next_tick = self.clock() + self.interval

        try:
            while not self._limit_reached():
                delay = next_tick - self.clock()
                if delay > 0:
                    self.sleep(delay)

                self.report_cycle()

                # An overrunning cycle pushes the next one to start right away
                next_tick = max(next_tick + self.interval, self.clock())

            logger.info("Simulation completed")
        except KeyboardInterrupt:
            logger.info("Simulation stopped by user")
        finally:
            self.state.status = TERMINATED
            try:
                self.sink.close()
            except Exception as e:
                logger.error(f"Error closing {self.sink.name} sink: {e}")
            logger.info(
                f"Cycles: {self.state.cycle}, readings: {self.state.readings_generated}, "
                f"failed deliveries: {self.state.delivery_failures}"
            )

        return 0


def build_sink(config: SimulatorConfig) -> TelemetrySink:
    """Create the external sink named by the config."""
    if config.sink == 'http':
        return HttpSink(config.api_endpoint, timeout=config.api_timeout)
    if config.sink == 'kafka':
        try:
            return KafkaSink(bootstrap_servers=config.kafka_brokers, topic=config.kafka_topic)
        except KafkaError as e:
            logger.error(f"Kafka unavailable at {config.kafka_brokers} ({e}), reporting to console only")
    return NullSink()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Simulate an HVAC fleet and emit periodic telemetry'
    )
    parser.add_argument(
        '--fleet-size',
        type=int,
        help='Number of HVAC systems to simulate (default: 100)'
    )
    parser.add_argument(
        '--interval-ms',
        type=int,
        help='Reporting interval in milliseconds (default: 60000)'
    )
    cycles = parser.add_mutually_exclusive_group()
    cycles.add_argument(
        '--max-cycles',
        type=int,
        help='Stop after this many reporting cycles (default: 60)'
    )
    cycles.add_argument(
        '--forever',
        action='store_true',
        help='Report until interrupted'
    )
    parser.add_argument(
        '--sink',
        choices=SINK_CHOICES,
        help='External sink (default: http if an API endpoint is set, else none)'
    )
    parser.add_argument(
        '--api-endpoint',
        help='Collector URL for the HTTP sink'
    )
    parser.add_argument(
        '--api-timeout',
        type=float,
        help='HTTP sink timeout in seconds (default: 10)'
    )
    parser.add_argument(
        '--kafka-broker',
        help='Kafka broker address (default: localhost:9092)'
    )
    parser.add_argument(
        '--topic',
        help='Kafka topic to publish to (default: hvac-telemetry)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging verbosity (default: INFO)'
    )
    return parser


def resolve_config(args: argparse.Namespace, config: SimulatorConfig) -> SimulatorConfig:
    """Apply CLI overrides on top of the environment config."""
    if args.fleet_size is not None:
        config.fleet_size = args.fleet_size
    if args.interval_ms is not None:
        config.interval_ms = args.interval_ms
    if args.forever:
        config.max_cycles = None
    elif args.max_cycles is not None:
        config.max_cycles = args.max_cycles
    if args.api_timeout is not None:
        config.api_timeout = args.api_timeout
    if args.kafka_broker:
        config.kafka_brokers = args.kafka_broker
    if args.topic:
        config.kafka_topic = args.topic
    if args.seed is not None:
        config.seed = args.seed

    if args.api_endpoint:
        config.api_endpoint = args.api_endpoint
    if args.sink:
        config.sink = args.sink
    elif args.api_endpoint:
        config.sink = 'http'

    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.getLogger().setLevel(args.log_level)

    try:
        config = resolve_config(args, load_config())
    except ConfigError as e:
        parser.error(str(e))

    rng = random.Random(config.seed)

    logger.info(f"Generating {config.fleet_size} HVAC systems...")
    fleet = generate_fleet(config.fleet_size, rng=rng)

    loop = ReportingLoop(
        fleet,
        interval=config.interval_seconds,
        max_cycles=config.max_cycles,
        sink=build_sink(config),
        rng=rng,
    )
    return loop.run()


if __name__ == '__main__':
    sys.exit(main())
