import logging

import cv2
import numpy as np

from correspondences.correspondence_matcher import CorrespondenceMatcher, Features
from correspondences.errors import FeatureExtractionError
from correspondences.matching import bf_match, bf_match_knn

SIFT_DESCRIPTOR_SIZE = 128

# OpenCV defaults, overridable through the options object.
DEFAULT_OPTIONS = {
    'n_features': 0,
    'n_octave_layers': 3,
    'contrast_threshold': 0.04,
    'edge_threshold': 10.0,
    'sigma': 1.6,
    'k': 2,
    'ratio': 0.75,
    'match_mode': 'knn',
    'max_distance': 250.0,
}


class SIFTMatcher(CorrespondenceMatcher):
    """Correspondence generator using SIFT features."""

    def __init__(self, opt=None) -> None:
        super().__init__()

        for name, default in DEFAULT_OPTIONS.items():
            setattr(self, name, getattr(opt, name, default))

        if self.match_mode not in ('knn', 'distance'):
            raise ValueError(f'Unknown match mode: {self.match_mode}')

        self.sift = cv2.SIFT_create(
            nfeatures=self.n_features,
            nOctaveLayers=self.n_octave_layers,
            contrastThreshold=self.contrast_threshold,
            edgeThreshold=self.edge_threshold,
            sigma=self.sigma,
        )

    def extract(self, img) -> Features:
        try:
            kp, des = self.sift.detectAndCompute(img, None)
        except cv2.error as e:
            raise FeatureExtractionError(f'SIFT failed: {e}') from e

        # OpenCV hands back None when nothing was detected.
        if des is None:
            des = np.zeros((0, SIFT_DESCRIPTOR_SIZE), dtype=np.float32)

        logging.debug(f'extracted {len(kp)} SIFT keypoints')

        return Features(keypoints=list(kp), descriptors=des)

    def match(self, des1, des2):
        if self.match_mode == 'distance':
            return bf_match(des1, des2, self.max_distance)
        return bf_match_knn(des1, des2, k=self.k, ratio=self.ratio)
