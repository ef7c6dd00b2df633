"""
Interest profiles - additive reinforcement with lazy half-life decay.
"""

from harmonia.services.interest.store import InterestProfileStore

__all__ = ["InterestProfileStore"]
