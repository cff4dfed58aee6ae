# src/config/settings.py

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SimulationSettings:
    # Energy and vehicle
    REFERENCE_BATTERY_KWH: float = 300.0           # Charge-rate reference pack
    SOC_DRAIN_PER_MINUTE: float = 0.05             # Percentage points while driving
    PROGRESS_PER_MINUTE: float = 0.02              # Route lap fraction per minute

    # Speed and time
    TICK_MINUTES: int = 1                          # Simulated minutes per tick at 1x
    TICK_INTERVAL_SECONDS: float = 2.0             # Wall time between ticks
    SIM_START_TIME: str = "05:30"
    ALLOWED_SPEEDS: Tuple[int, ...] = (1, 2, 4, 8, 16)

    # Charger telemetry baselines (power tier split at 100 kW)
    HIGH_POWER_THRESHOLD_KW: float = 100.0
    HIGH_POWER_CURRENT_A: float = 180.0
    LOW_POWER_CURRENT_A: float = 100.0
    CURRENT_JITTER_A: float = 20.0
    HIGH_POWER_VOLTAGE_V: float = 740.0
    HIGH_POWER_VOLTAGE_JITTER_V: float = 20.0
    LOW_POWER_VOLTAGE_V: float = 395.0
    LOW_POWER_VOLTAGE_JITTER_V: float = 10.0
    MIN_DELIVERY_FRACTION: float = 0.9

    # Depot bookkeeping
    DEPOT_ON_SITE_RADIUS_KM: float = 0.5
    RESOLVED_HISTORY_LIMIT: int = 50
    DEBUG_CONSISTENCY_CHECKS: bool = False

    # Logging
    LOG_FILE_NAME: str = "simulation_log.csv"


@dataclass(frozen=True)
class OrchestrationSettings:
    # Pull-out risk
    NOT_CHARGING_DEFICIT: float = 5.0              # Points below required before alerting
    NOT_CHARGING_WINDOW_MINUTES: int = 90
    CRITICAL_DEFICIT: float = 20.0
    CHARGE_SAFETY_BUFFER_MINUTES: int = 10

    # Penalties (currency units)
    PENALTY_CHARGING_FAULT: float = 2400.0
    PENALTY_PULL_OUT_RISK: float = 1800.0
    PENALTY_SOC_DEVIATION: float = 1200.0
    PENALTY_GRID_WARNING: float = 2000.0
    PENALTY_GRID_CRITICAL: float = 5000.0
    PENALTY_MAINTENANCE: float = 0.0

    # Grid load bands (percent of effective capacity)
    GRID_WARNING_PERCENT: float = 85.0
    GRID_CRITICAL_PERCENT: float = 95.0
    GRID_SHED_SAVINGS: float = 500.0

    # Swap scoring
    MAX_SWAP_CANDIDATES: int = 3
    SWAP_BASE_CONFIDENCE: float = 50.0
    SWAP_SURPLUS_CAP: float = 20.0
    MAX_CONFIDENCE: int = 99

    # Fallback confidences when no swap candidate exists
    CHARGING_FAULT_FALLBACK: int = 50
    PULL_OUT_FALLBACK: int = 70
    SOC_DEVIATION_FALLBACK: int = 60
    ACCEPT_PARTIAL_CONFIDENCE: int = 50
    GRID_SHED_CONFIDENCE: int = 85
    GRID_MONITOR_CONFIDENCE: int = 40
    MAINTENANCE_SWAP_CONFIDENCE: int = 90
    MAINTENANCE_CLEAR_CONFIDENCE: int = 60

    # Dashboard
    READINESS_MARGIN: float = 5.0
    DEFAULT_TARIFF_RATE: float = 0.15
    CO2_KG_PER_KM: float = 0.89


@dataclass(frozen=True)
class Paths:
    DEPOTS_CSV: str = "depots.csv"
    GRID_CONSTRAINTS_CSV: str = "grid_constraints.csv"
    CHARGERS_CSV: str = "chargers.csv"
    VEHICLES_CSV: str = "vehicles.csv"
    SCHEDULE_CSV: str = "schedule.csv"
    ROUTES_CSV: str = "routes.csv"
    TARIFF_CSV: str = "tariff.csv"
    SCENARIOS_CSV: str = "scenarios.csv"
    SCENARIO_EVENTS_CSV: str = "scenario_events.csv"
