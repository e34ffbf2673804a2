from .chunk import Corpus, CorpusChunk, ScoredChunk
from .recommendation import LoanRecommendation, RecommendationResult, UserProfile

__all__ = ["Corpus", "CorpusChunk", "ScoredChunk", "LoanRecommendation", "RecommendationResult", "UserProfile"]
