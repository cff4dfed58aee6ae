# src/scenarios/__init__.py
from .events import EventQueue, EventType, Scenario, ScenarioEvent, find_scenario
from .manager import ScenarioManager

__all__ = [
    "EventQueue",
    "EventType",
    "Scenario",
    "ScenarioEvent",
    "find_scenario",
    "ScenarioManager"
]
