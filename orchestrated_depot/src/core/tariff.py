# src/core/tariff.py
from dataclasses import dataclass, field
from typing import List

from orchestrated_depot.src.config.settings import OrchestrationSettings


@dataclass(frozen=True)
class TariffPeriod:
    start_hour: int
    end_hour: int           # exclusive
    rate: float             # currency per kWh
    period_type: str        # peak, standard, off-peak, super-off-peak

    def covers(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


@dataclass
class EnergyTariff:
    name: str
    currency: str = "£"
    periods: List[TariffPeriod] = field(default_factory=list)

    def rate_for_hour(self, hour: int) -> TariffPeriod:
        for period in self.periods:
            if period.covers(hour):
                return period
        # Gaps in the tariff table are billed at the standard fallback rate
        return TariffPeriod(hour, hour + 1, OrchestrationSettings.DEFAULT_TARIFF_RATE, "standard")

    @property
    def peak_rate(self) -> float:
        if not self.periods:
            return OrchestrationSettings.DEFAULT_TARIFF_RATE
        return max(p.rate for p in self.periods)
