"""
Hatchery - Union Federation Simulation Engine

A deterministic, seeded engine for a short satirical run: generate unions,
license them, bundle them into federations that always send two delegates,
and survive five cycles of events until the election.

The engine provides:
- Seeded, serializable randomness
- A pure reducer over immutable run state
- Content-driven, condition-gated events
- Save snapshots, autoplay bots, a REST API and a CLI
"""

__version__ = "0.1.0"
