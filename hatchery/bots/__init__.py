"""
Bots - Autoplay policies.

Policies drive complete runs for balance simulations and tests.
"""

from .policy import BotPolicy, RandomPolicy, ReformPolicy, POLICIES

__all__ = [
    "BotPolicy",
    "RandomPolicy",
    "ReformPolicy",
    "POLICIES",
]
