import logging
from typing import List, NamedTuple, Sequence, Tuple

import cv2
import numpy as np

from correspondences.errors import MatchError


class Match(NamedTuple):
    """A single accepted correspondence between a query and a train descriptor."""
    query_idx: int
    train_idx: int
    distance: float

    @classmethod
    def from_dmatch(cls, m):
        return cls(int(m.queryIdx), int(m.trainIdx), float(m.distance))

    def to_dmatch(self):
        return cv2.DMatch(self.query_idx, self.train_idx, self.distance)


def _prepare_descriptors(des1, des2, min_train=1):
    """Validates both descriptor matrices and returns them as float32.

    Raises MatchError for missing, empty or width-mismatched input, and when
    the train set has fewer than `min_train` rows.
    """
    if des1 is None or des2 is None:
        raise MatchError('descriptors are missing')

    des1 = np.asarray(des1, dtype=np.float32)
    des2 = np.asarray(des2, dtype=np.float32)

    if des1.ndim != 2 or des2.ndim != 2:
        raise MatchError(
            f'descriptors must be 2D matrices, got shapes {des1.shape} and {des2.shape}'
        )
    if des1.shape[0] == 0 or des2.shape[0] == 0:
        raise MatchError(
            f'cannot match empty descriptor sets ({des1.shape[0]} vs {des2.shape[0]} rows)'
        )
    if des1.shape[1] != des2.shape[1]:
        raise MatchError(
            f'descriptor widths differ: {des1.shape[1]} != {des2.shape[1]}'
        )
    if des2.shape[0] < min_train:
        raise MatchError(
            f'need at least {min_train} candidate descriptors, got {des2.shape[0]}'
        )

    return des1, des2


def bf_match_knn(des1, des2, k: int = 2, ratio: float = 0.75) -> List[Match]:
    """Brute-force k-NN match of `des1` (query) against `des2` (train) with
    Lowe's ratio test.

    A query survives only when it has at least two neighbours and its best
    distance is below `ratio` times the second best one. Matches are returned
    in query order.
    """
    if k < 1:
        raise ValueError(f'k must be >= 1, got {k}')
    if not 0 < ratio < 1:
        raise ValueError(f'ratio must be in (0, 1), got {ratio}')

    des1, des2 = _prepare_descriptors(des1, des2, min_train=2)

    if k == 1:
        logging.warning('k=1 leaves no second neighbour for the ratio test, no match can pass')

    bf = cv2.BFMatcher(cv2.NORM_L2)
    try:
        knn_matches = bf.knnMatch(des1, des2, k=k)
    except cv2.error as e:
        raise MatchError(f'knn search failed: {e}') from e

    # Apply ratio test
    good = []
    for neighbours in knn_matches:
        if len(neighbours) < 2:
            continue
        m, n = neighbours[0], neighbours[1]
        if m.distance < ratio * n.distance:
            good.append(Match.from_dmatch(m))

    logging.debug(f'ratio test kept {len(good)} of {len(knn_matches)} queries (k={k}, ratio={ratio})')

    return good


def bf_match(des1, des2, max_distance: float) -> List[Match]:
    """Brute-force nearest neighbour match keeping matches closer than `max_distance`."""
    if max_distance <= 0:
        raise ValueError(f'max_distance must be positive, got {max_distance}')

    des1, des2 = _prepare_descriptors(des1, des2)

    bf = cv2.BFMatcher(cv2.NORM_L2, crossCheck=False)
    try:
        matches = bf.match(des1, des2)
    except cv2.error as e:
        raise MatchError(f'nearest neighbour search failed: {e}') from e

    good = [Match.from_dmatch(m) for m in matches if m.distance < max_distance]

    logging.debug(f'distance threshold {max_distance} kept {len(good)} of {len(matches)} matches')

    return good


def points_from_matches(matches: Sequence[Match], kp1, kp2) -> Tuple[np.ndarray, np.ndarray]:
    # Query indices refer to kp1, train indices to kp2.
    if len(matches) == 0:
        return np.zeros((0, 2)), np.zeros((0, 2))

    points1 = np.asarray([kp1[match.query_idx].pt for match in matches], dtype=np.float64)
    points2 = np.asarray([kp2[match.train_idx].pt for match in matches], dtype=np.float64)

    return points1, points2


def gather_points_2d(all_matches, all_keypoints) -> List[np.ndarray]:
    """Collects 2D points for a set of views that share a reference view.

    `all_matches[i]` holds the matches of view 0 (query) against view i + 1
    (train), so `all_keypoints` needs one more entry than `all_matches`. Every
    match set must describe the same tracks, hence have the same length. The
    reference points are taken from the query side of the first match set.

    Returns one (M, 2) array per view.
    """
    if len(all_matches) == 0:
        raise ValueError('at least one match set is required')
    if len(all_keypoints) != len(all_matches) + 1:
        raise ValueError(
            f'expected {len(all_matches) + 1} keypoint sets, got {len(all_keypoints)}'
        )

    num_matches = len(all_matches[0])
    if any(len(matches) != num_matches for matches in all_matches):
        raise ValueError('all match sets must have the same number of matches')

    logging.debug(f'gathering {num_matches} points over {len(all_keypoints)} views')

    points_2d = [
        np.asarray(
            [all_keypoints[0][m.query_idx].pt for m in all_matches[0]],
            dtype=np.float64,
        ).reshape(-1, 2)
    ]
    for view, matches in enumerate(all_matches, start=1):
        points_2d.append(
            np.asarray(
                [all_keypoints[view][m.train_idx].pt for m in matches],
                dtype=np.float64,
            ).reshape(-1, 2)
        )

    return points_2d
