import pandas as pd

df = pd.read_csv('orchestrated_depot/output/simulation_log.csv')

print(f'Total rows: {len(df)}')
print(f'Time steps: {df["sim_time"].nunique()}')
print(f'Vehicles: {df["vehicle_id"].nunique()}')
print(f'Duration: {df["sim_time"].min()} to {df["sim_time"].max()}')

print(f'\n{"="*60}')
print('STATUS DISTRIBUTION:')
print(df['status'].value_counts())

print(f'\n{"="*60}')
print('SOC STATISTICS:')
print(df['soc'].describe())

print(f'\n{"="*60}')
print('FINAL SOC BY VEHICLE:')
last = df[df['sim_time'] == df['sim_time'].max()]
print(last[['vehicle_id', 'status', 'soc', 'assigned_duty']].to_string(index=False))

print(f'\n{"="*60}')
print('PEAK DEPOT LOAD (kW):')
print(df.groupby('depot_id')['depot_load_kw'].max())

print(f'\n{"="*60}')
print('ACTIVE ALERTS OVER TIME (first few unique times):')
for time in df['sim_time'].unique()[:10]:
    step_df = df[df['sim_time'] == time]
    charging = len(step_df[step_df['status'] == 'Charging'])
    driving = len(step_df[step_df['status'] == 'Driving'])
    print(f'{time}: {charging} charging, {driving} driving, {step_df["active_alerts"].iloc[0]} alerts')
