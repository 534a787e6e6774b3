"""
HVAC Fleet Simulator

Generates synthetic HVAC equipment and per-tick telemetry readings:
- Static fleet metadata (type, brand, install/maintenance dates, location, specs)
- Memoryless operating mode per reading (cooling / heating / idle)
- Independent thermal, pressure, electrical and airflow sub-models
- Injectable random source for reproducible runs
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from dataclasses import dataclass, field


HVAC_TYPES = [
    'Central AC', 'Heat Pump', 'Ductless Mini-Split',
    'Window Unit', 'Packaged Terminal', 'Chiller',
]
HVAC_BRANDS = [
    'Trane', 'Carrier', 'Lennox', 'Rheem', 'Goodman',
    'York', 'Daikin', 'Mitsubishi', 'Fujitsu',
]

MAX_INSTALL_AGE = timedelta(days=5 * 365)
MAX_MAINTENANCE_AGE = timedelta(days=6 * 30)

# Net probabilities of each operating mode for a single reading
MODE_WEIGHTS = {
    'cooling': 0.70,
    'heating': 0.09,
    'idle': 0.21,
}

FILTER_REPLACE_PROBABILITY = 0.10
ALARM_PROBABILITY = 0.05
ALARM_CODE = 'high_pressure'


@dataclass(frozen=True)
class Location:
    """Where a device is installed"""
    building: str
    floor: int
    room: int


@dataclass(frozen=True)
class DeviceSpecs:
    """Nameplate ratings of a device"""
    cooling_capacity_tons: int
    efficiency_seer: float


@dataclass(frozen=True)
class Device:
    """Static descriptor of one simulated HVAC system"""
    device_id: str
    name: str
    device_type: str
    brand: str
    installation_date: datetime
    last_maintenance: datetime
    location: Location
    specs: DeviceSpecs

    def to_dict(self) -> Dict:
        return {
            'device_id': self.device_id,
            'name': self.name,
            'device_type': self.device_type,
            'brand': self.brand,
            'installation_date': self.installation_date.isoformat(),
            'last_maintenance': self.last_maintenance.isoformat(),
            'location': {
                'building': self.location.building,
                'floor': self.location.floor,
                'room': self.location.room,
            },
            'specs': {
                'cooling_capacity': f"{self.specs.cooling_capacity_tons} tons",
                'efficiency': f"{self.specs.efficiency_seer:.1f} SEER",
            },
        }


@dataclass
class TelemetryReading:
    """One synthetic reading for one device"""
    timestamp: datetime
    system_id: str
    system_name: str
    status: str
    return_temp: float  # °C
    supply_temp: float  # °C
    outdoor_temp: float  # °C
    suction_pressure: float  # psi
    discharge_pressure: float  # psi
    voltage: float  # V
    current: float  # A
    power_consumption: float  # kW
    air_flow: float  # CFM
    filter_status: str
    alarms: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Serialize with temperatures, pressures and power grouped"""
        return {
            'timestamp': self.timestamp.isoformat(),
            'system_id': self.system_id,
            'system_name': self.system_name,
            'status': self.status,
            'temperatures': {
                'return': round(self.return_temp, 1),
                'supply': round(self.supply_temp, 1),
                'outdoor': round(self.outdoor_temp, 2),
            },
            'pressures': {
                'suction': round(self.suction_pressure, 2),
                'discharge': round(self.discharge_pressure, 2),
            },
            'power': {
                'voltage': round(self.voltage, 2),
                'current': round(self.current, 2),
                'power_consumption': round(self.power_consumption, 2),
            },
            'air_flow': round(self.air_flow, 2),
            'filter_status': self.filter_status,
            'alarms': list(self.alarms),
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _backdate(now: datetime, max_age: timedelta, rng: random.Random) -> datetime:
    """Random instant in [now - max_age, now]"""
    return now - timedelta(seconds=rng.uniform(0, max_age.total_seconds()))


def generate_fleet(count: int, rng: Optional[random.Random] = None,
                   now: Optional[datetime] = None) -> List[Device]:
    """
    Generate the simulated fleet

    Args:
        count: Number of devices
        rng: Random source (unseeded if omitted)
        now: Reference time for install and maintenance dates

    Returns:
        Devices named HVAC-1..HVAC-count with unique ids
    """
    rng = rng or random.Random()
    now = now or _utcnow()

    devices = []
    for i in range(count):
        devices.append(Device(
            device_id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
            name=f"HVAC-{i + 1}",
            device_type=rng.choice(HVAC_TYPES),
            brand=rng.choice(HVAC_BRANDS),
            installation_date=_backdate(now, MAX_INSTALL_AGE, rng),
            last_maintenance=_backdate(now, MAX_MAINTENANCE_AGE, rng),
            location=Location(
                building=f"Building-{rng.randint(1, 10)}",
                floor=rng.randint(1, 10),
                room=rng.randint(1, 50),
            ),
            specs=DeviceSpecs(
                cooling_capacity_tons=rng.randint(1, 10),
                efficiency_seer=round(rng.uniform(10, 15), 1),
            ),
        ))

    return devices


def choose_mode(rng: random.Random) -> str:
    """Pick an operating mode from MODE_WEIGHTS"""
    modes = list(MODE_WEIGHTS)
    return rng.choices(modes, weights=[MODE_WEIGHTS[m] for m in modes])[0]


def generate_telemetry(device: Device, rng: Optional[random.Random] = None,
                       now: Optional[datetime] = None) -> TelemetryReading:
    """Generate one reading for a device. Every value is sampled independently."""
    rng = rng or random.Random()
    now = now or _utcnow()

    mode = choose_mode(rng)
    idle = mode == 'idle'

    # Thermal
    return_temp = rng.uniform(20, 30)
    if mode == 'cooling':
        supply_temp = return_temp - rng.uniform(5, 8)
    elif mode == 'heating':
        supply_temp = return_temp + rng.uniform(5, 8)
    else:
        supply_temp = return_temp

    return_temp += rng.uniform(-1, 1)
    supply_temp += rng.uniform(-1, 1)
    outdoor_temp = rng.uniform(15, 35)

    # Refrigerant circuit
    suction_pressure = rng.uniform(60, 80)
    discharge_pressure = rng.uniform(150, 250)

    # Electrical
    voltage = 208 + rng.uniform(-5, 5)
    if idle:
        current = rng.uniform(2, 5)
        power_consumption = rng.uniform(0.5, 1.5)
    else:
        current = rng.uniform(10, 25)
        power_consumption = rng.uniform(3, 10)

    air_flow = 0.0 if idle else rng.uniform(1000, 3000)

    filter_status = 'replace' if rng.random() < FILTER_REPLACE_PROBABILITY else 'ok'
    alarms = [ALARM_CODE] if rng.random() < ALARM_PROBABILITY else []

    return TelemetryReading(
        timestamp=now,
        system_id=device.device_id,
        system_name=device.name,
        status=mode,
        return_temp=return_temp,
        supply_temp=supply_temp,
        outdoor_temp=outdoor_temp,
        suction_pressure=suction_pressure,
        discharge_pressure=discharge_pressure,
        voltage=voltage,
        current=current,
        power_consumption=power_consumption,
        air_flow=air_flow,
        filter_status=filter_status,
        alarms=alarms,
    )
