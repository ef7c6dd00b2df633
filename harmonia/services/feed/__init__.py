"""
Feed ranking - cosine similarity ordering with a deterministic curiosity quota.
"""

from harmonia.services.feed.filtering import FeedFiltering
from harmonia.services.feed.ranking import FeedRankingEngine, label_for_similarity
from harmonia.services.feed.sampling import curiosity_seed

__all__ = [
    "FeedFiltering",
    "FeedRankingEngine",
    "curiosity_seed",
    "label_for_similarity",
]
