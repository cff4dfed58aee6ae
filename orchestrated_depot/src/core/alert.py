# src/core/alert.py
"""
Alerts raised by the orchestration engine and the remediation actions attached to them.
Alerts are rebuilt on every orchestration pass; only unresolved ones carry forward.
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class AlertSeverity(str, Enum):
    CRITICAL = "Critical"
    WARNING = "Warning"
    INFO = "Info"


class AlertCategory(str, Enum):
    PULL_OUT_RISK = "pull-out-risk"
    CHARGING_FAULT = "charging-fault"
    SOC_DEVIATION = "soc-deviation"
    GRID_CONSTRAINT = "grid-constraint"
    OPPORTUNITY_CHARGING = "opportunity-charging"
    MAINTENANCE = "maintenance"
    DRIVER_CONFLICT = "driver-conflict"
    CROSS_DEPOT = "cross-depot"


class ActionType(str, Enum):
    SWAP = "swap"
    REASSIGN = "reassign"
    PRIORITIZE = "prioritize"
    ESCALATE = "escalate"
    ACKNOWLEDGE = "acknowledge"


@dataclass
class ProposedAction:
    action_id: str                      # Unique within its alert only
    label: str
    description: str
    action_type: ActionType
    confidence: int = 0
    source_vehicle_id: Optional[str] = None
    target_vehicle_id: Optional[str] = None
    estimated_savings: Optional[float] = None
    is_recommended: bool = False


@dataclass
class Alert:
    alert_id: str
    severity: AlertSeverity
    category: AlertCategory
    title: str
    message: str
    depot_id: str
    timestamp: datetime

    # Context
    vehicle_id: Optional[str] = None
    charger_id: Optional[str] = None
    duty_id: Optional[str] = None
    deadline_time: Optional[datetime] = None

    # Resolution
    is_resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution: Optional[str] = None

    # Impact
    impact_description: str = ""
    affected_services: int = 0
    penalty_risk: float = 0.0

    proposed_actions: List[ProposedAction] = field(default_factory=list)
    confidence_score: int = 0

    @property
    def dedup_key(self) -> str:
        """
        Logical identity used to match an alert against the previous pass.
        Two root causes sharing category and subject collapse into one key.
        """
        category = self.category.value if isinstance(self.category, Enum) else self.category
        return f"{category}:{self.vehicle_id or self.charger_id or ''}"

    @property
    def recommended_action(self) -> Optional[ProposedAction]:
        return next((a for a in self.proposed_actions if a.is_recommended), None)

    def find_action(self, action_id: str) -> Optional[ProposedAction]:
        return next((a for a in self.proposed_actions if a.action_id == action_id), None)


class AlertIdFactory:
    """
    Sequential alert id generator handed to the engine by its caller.

    Usage:
        ids = AlertIdFactory()
        ids()  # 'ALERT-00001'
    """

    def __init__(self, prefix: str = "ALERT", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter):05d}"

    def __repr__(self) -> str:
        return f"AlertIdFactory(prefix={self.prefix!r})"
