import cv2

from correspondences.errors import RenderError


def draw_keypoints(img, keypoints):
    """Draws keypoints with their size and orientation."""
    try:
        return cv2.drawKeypoints(
            img,
            keypoints,
            None,
            flags=cv2.DRAW_MATCHES_FLAGS_DRAW_RICH_KEYPOINTS,
        )
    except cv2.error as e:
        raise RenderError(f'drawing keypoints failed: {e}') from e


def draw_matches(img1, kp1, img2, kp2, matches):
    """Draws `img1` and `img2` side by side with a line per match."""
    try:
        return cv2.drawMatches(
            img1,
            kp1,
            img2,
            kp2,
            [m.to_dmatch() for m in matches],
            None,
            flags=cv2.DrawMatchesFlags_NOT_DRAW_SINGLE_POINTS,
        )
    except cv2.error as e:
        raise RenderError(f'drawing matches failed: {e}') from e
