"""
SIFT correspondence generation: feature extraction, brute-force matching with
a ratio test and drawing helpers.
"""

from .correspondence_matcher import CorrespondenceMatcher, Features
from .errors import (
    CorrespondenceError,
    FeatureExtractionError,
    ImageLoadError,
    MatchError,
    RenderError,
)
from .matching import (
    Match,
    bf_match,
    bf_match_knn,
    gather_points_2d,
    points_from_matches,
)
from .rendering import draw_keypoints, draw_matches
from .sift_matcher import SIFTMatcher

__all__ = [
    'CorrespondenceMatcher',
    'Features',
    'SIFTMatcher',
    'Match',
    'bf_match',
    'bf_match_knn',
    'gather_points_2d',
    'points_from_matches',
    'draw_keypoints',
    'draw_matches',
    'CorrespondenceError',
    'FeatureExtractionError',
    'ImageLoadError',
    'MatchError',
    'RenderError',
]
