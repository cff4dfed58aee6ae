import sys

from orchestrated_depot.src.data.loader import build_initial_state, load_all_network_data
from orchestrated_depot.src.scenarios.events import find_scenario
from orchestrated_depot.src.simulation.engine import SimulationEngine
from orchestrated_depot.src.simulation.logger import SimulationLogger
from orchestrated_depot.src.simulation.noise import RandomNoise

scenario_id = sys.argv[1] if len(sys.argv) > 1 else None
ticks = int(sys.argv[2]) if len(sys.argv) > 2 else 60

data = load_all_network_data()
scenario = find_scenario(data["scenarios"], scenario_id) if scenario_id else None

engine = SimulationEngine(
    build_initial_state(data=data),
    logger=SimulationLogger(),
    noise=RandomNoise(seed=42),
    scenario=scenario
)
engine.set_speed(4)
engine.run(ticks)

for alert in engine.state.unresolved_alerts:
    action = alert.recommended_action
    print(f'{alert.alert_id} [{alert.severity.value}] {alert.title} → '
          f'{action.label if action else "no action"} ({alert.confidence_score}%)')

stats = engine.stats()
print(f'\nReadiness: {stats.fleet_readiness}% | Charger uptime: {stats.charger_uptime}% | '
      f'Load: {stats.current_load_kw:.0f}/{stats.max_load_kw:.0f} kW')
