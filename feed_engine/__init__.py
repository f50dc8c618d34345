"""Feed engine package.

The package is structured around two pure cores and the plumbing that feeds them:
- `models.py` defines the posting and profile schemas read from the store.
- `ranking.py` scores postings by engagement and recency and orders the feed.
- `profile_gate.py` decides whether a profile is complete and which onboarding
  step comes next.
- `feed.py` filters, ranks and annotates postings for a viewer.
- `sources/` contains connectors that fetch snapshots from the backing store.
"""
