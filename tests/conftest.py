import matplotlib

matplotlib.use('Agg')

import cv2
import numpy as np
import pytest


def textured_image(seed, size=(240, 320)):
    """Blurred noise, which gives SIFT plenty of blobs to detect."""
    rng = np.random.default_rng(seed)
    noise = rng.integers(0, 256, size=size, dtype=np.uint8)
    img = cv2.GaussianBlur(noise, (0, 0), 3)
    return cv2.normalize(img, None, 0, 255, cv2.NORM_MINMAX)


@pytest.fixture
def image_pair(tmp_path):
    """Writes an image and a shifted crop of it, returns both paths."""
    base = textured_image(0, size=(260, 340))
    img_a = cv2.cvtColor(base[:240, :320], cv2.COLOR_GRAY2BGR)
    img_b = cv2.cvtColor(base[20:260, 20:340], cv2.COLOR_GRAY2BGR)

    path_a = tmp_path / 'a.png'
    path_b = tmp_path / 'b.png'
    cv2.imwrite(str(path_a), img_a)
    cv2.imwrite(str(path_b), img_b)

    return str(path_a), str(path_b)
