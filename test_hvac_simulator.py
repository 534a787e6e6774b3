"""
Tests for fleet and telemetry generation.
"""

import random
import uuid
from datetime import datetime, timezone

import pytest

from hvac_simulator.hvac_simulator import (
    ALARM_CODE,
    HVAC_BRANDS,
    HVAC_TYPES,
    MAX_INSTALL_AGE,
    MAX_MAINTENANCE_AGE,
    MODE_WEIGHTS,
    choose_mode,
    generate_fleet,
    generate_telemetry,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
SAMPLES = 10000


@pytest.fixture
def device():
    return generate_fleet(1, rng=random.Random(7), now=NOW)[0]


@pytest.fixture
def readings(device):
    rng = random.Random(1234)
    return [generate_telemetry(device, rng, now=NOW) for _ in range(SAMPLES)]


def test_fleet_size_and_unique_ids():
    fleet = generate_fleet(250, rng=random.Random(1), now=NOW)

    assert len(fleet) == 250
    assert len({d.device_id for d in fleet}) == 250
    assert [d.name for d in fleet[:3]] == ['HVAC-1', 'HVAC-2', 'HVAC-3']
    assert uuid.UUID(fleet[0].device_id).version == 4


def test_empty_fleet():
    assert generate_fleet(0, rng=random.Random(1)) == []


def test_fleet_fields_within_ranges():
    for d in generate_fleet(500, rng=random.Random(2), now=NOW):
        assert d.device_type in HVAC_TYPES
        assert d.brand in HVAC_BRANDS
        assert NOW - MAX_INSTALL_AGE <= d.installation_date <= NOW
        assert NOW - MAX_MAINTENANCE_AGE <= d.last_maintenance <= NOW
        assert 1 <= int(d.location.building.split('-')[1]) <= 10
        assert 1 <= d.location.floor <= 10
        assert 1 <= d.location.room <= 50
        assert 1 <= d.specs.cooling_capacity_tons <= 10
        assert 10.0 <= d.specs.efficiency_seer <= 15.0


def test_fleet_is_reproducible_with_seed():
    a = generate_fleet(5, rng=random.Random(99), now=NOW)
    b = generate_fleet(5, rng=random.Random(99), now=NOW)
    assert a == b


def test_device_is_immutable(device):
    with pytest.raises(AttributeError):
        device.name = 'renamed'


def test_device_to_dict(device):
    data = device.to_dict()
    assert data['name'] == 'HVAC-1'
    assert data['specs']['cooling_capacity'].endswith(' tons')
    assert data['specs']['efficiency'].endswith(' SEER')
    assert set(data['location']) == {'building', 'floor', 'room'}


def test_reading_references_device(device):
    reading = generate_telemetry(device, random.Random(3), now=NOW)
    assert reading.system_id == device.device_id
    assert reading.system_name == device.name
    assert reading.timestamp == NOW


def test_idle_readings(readings):
    idle = [r for r in readings if r.status == 'idle']
    assert idle
    for r in idle:
        assert r.air_flow == 0
        assert 2 <= r.current < 5
        assert 0.5 <= r.power_consumption < 1.5
        assert abs(r.supply_temp - r.return_temp) < 2


def test_running_readings(readings):
    running = [r for r in readings if r.status != 'idle']
    for r in running:
        assert 1000 <= r.air_flow < 3000
        assert 10 <= r.current < 25
        assert 3 <= r.power_consumption < 10


def test_supply_return_offset_by_mode(readings):
    for r in readings:
        diff = r.supply_temp - r.return_temp
        if r.status == 'cooling':
            assert -10 < diff < -3
        elif r.status == 'heating':
            assert 3 < diff < 10


def test_common_ranges(readings):
    for r in readings:
        assert 19 <= r.return_temp < 31
        assert 15 <= r.outdoor_temp < 35
        assert 60 <= r.suction_pressure < 80
        assert 150 <= r.discharge_pressure < 250
        assert 203 <= r.voltage < 213
        assert r.filter_status in ('ok', 'replace')
        assert r.alarms in ([], [ALARM_CODE])


def test_filter_replace_rate(readings):
    rate = sum(r.filter_status == 'replace' for r in readings) / SAMPLES
    assert rate == pytest.approx(0.10, abs=0.02)


def test_alarm_rate(readings):
    rate = sum(bool(r.alarms) for r in readings) / SAMPLES
    assert rate == pytest.approx(0.05, abs=0.015)


def test_mode_distribution():
    rng = random.Random(42)
    modes = [choose_mode(rng) for _ in range(SAMPLES)]
    for mode, weight in MODE_WEIGHTS.items():
        assert modes.count(mode) / SAMPLES == pytest.approx(weight, abs=0.02)


def test_reading_to_dict_groups(device):
    data = generate_telemetry(device, random.Random(5), now=NOW).to_dict()
    assert set(data['temperatures']) == {'return', 'supply', 'outdoor'}
    assert set(data['pressures']) == {'suction', 'discharge'}
    assert set(data['power']) == {'voltage', 'current', 'power_consumption'}
    assert data['timestamp'] == NOW.isoformat()
    assert data['status'] in MODE_WEIGHTS
