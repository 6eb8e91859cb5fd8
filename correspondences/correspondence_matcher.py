from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from correspondences.matching import Match, points_from_matches


@dataclass
class Features:
    keypoints: Sequence  # cv2.KeyPoint per row of descriptors
    descriptors: np.ndarray  # (N, D)

    def __len__(self):
        return len(self.keypoints)


class CorrespondenceMatcher:
    """Superclass for feature extractor, descriptors and correspondence
    generators."""

    def extract(self, img) -> Features:
        raise NotImplementedError

    def match(self, des1, des2) -> List[Match]:
        raise NotImplementedError

    def get_correspondences(self, img1, img2):
        """Returns matched points of `img1` and `img2` as two (M, 2) arrays,
        best matches first."""
        feat1 = self.extract(img1)
        feat2 = self.extract(img2)

        good = self.match(feat1.descriptors, feat2.descriptors)

        # Sorting by distance.
        good = sorted(good, key=lambda x: x.distance)

        return points_from_matches(good, feat1.keypoints, feat2.keypoints)
