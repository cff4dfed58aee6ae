from orchestrated_depot.src.data.loader import load_all_network_data

d = load_all_network_data()

print(f'Depots: {len(d["depots"])}')
print(f'Chargers: {len(d["chargers"])}')
print(f'Vehicles: {len(d["vehicles"])}')
print(f'Duties: {len(d["schedule"])}')
print(f'Routes: {len(d["routes"])}')
print(f'Waypoints: {sum(len(r) for r in d["routes"])}')
print(f'Scenarios: {len(d["scenarios"])}')
