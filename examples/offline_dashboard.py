"""Client-side fetch with offline fallback.

This example fetches every dashboard source once, then keeps the data
fresh in the background. Sources that cannot be reached are served from
the last stored copy or the bundled snapshot, and the result says so.
"""

from pathlib import Path

from dashfeed import DashboardRefresher, ResilientClientFetcher, Settings, parse_records


# Endpoints come from DASHFEED_<NAME>_CSV_URL variables
settings = Settings.from_env()

# Option 1: Factory method (default sources, file store, HTTP fetcher)
fetcher = ResilientClientFetcher.from_settings(settings, store_dir=Path(".dashfeed/store"))

# Option 2: Pretend the client is offline to see the fallback tiers
# fetcher = ResilientClientFetcher.from_settings(settings, connectivity=lambda: False)

result = fetcher.fetch_all()

for key, payload in result.datasets.items():
    print(f"{key}: {len(parse_records(payload))} rows from {result.tiers.get(key)}")

# offline_notice is None unless at least one source was degraded
if result.offline_notice:
    print(result.offline_notice)
    for disclosure in result.disclosures:
        print(f"  {disclosure.source_label}: {disclosure.reason}")


# Long-lived sessions re-fetch every 15 minutes until stopped
def show(state) -> None:
    if not state.loading and state.data is not None:
        print(f"Refreshed {len(state.data)} datasets at {state.last_updated}")


with DashboardRefresher(fetcher, on_update=show) as refresher:
    pass  # render refresher.state in your UI loop
