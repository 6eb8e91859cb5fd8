import argparse
import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

import cv2
import matplotlib.pyplot as plt

from correspondences.errors import ImageLoadError, MatchError, RenderError
from correspondences.rendering import draw_keypoints, draw_matches
from correspondences.sift_matcher import SIFTMatcher


@dataclass
class VizConfig:
    image_path_a: str = 'img1.png'
    image_path_b: str = 'img2.png'
    window_title: str = 'Correspondences'
    k: int = 2
    ratio: float = 0.75
    match_mode: str = 'knn'
    max_distance: float = 250.0
    corresp_n: int = -1
    n_features: int = 0
    n_octave_layers: int = 3
    contrast_threshold: float = 0.04
    edge_threshold: float = 10.0
    sigma: float = 1.6
    display: bool = True
    save_dir: Optional[str] = None

    @classmethod
    def from_args(cls, args):
        values = {f.name: getattr(args, f.name) for f in fields(cls) if hasattr(args, f.name)}
        values['image_path_a'] = args.path_a
        values['image_path_b'] = args.path_b
        values['display'] = not args.no_display
        return cls(**values)


def load_image(path):
    """Reads an image from disk, returns (RGB image, grayscale image)."""
    img = cv2.imread(path)
    if img is None:
        raise ImageLoadError(f'Could not read image {path}')

    orig_img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    gray_img = cv2.cvtColor(orig_img, cv2.COLOR_RGB2GRAY)

    return orig_img, gray_img


def show(window_title, img, save_path=None, display=True):
    fig = plt.figure(window_title)
    plt.axis('off')
    plt.title(window_title)
    plt.imshow(img)

    if save_path is not None:
        plt.savefig(
            save_path,
            bbox_inches='tight',
            dpi=200,
        )
        logging.info(f'saved {save_path}')

    if display:
        # Blocks until the window is closed.
        plt.show()

    plt.close(fig)


def _save_path(config, name):
    if config.save_dir is None:
        return None
    os.makedirs(config.save_dir, exist_ok=True)
    return os.path.join(config.save_dir, name)


def run(config):
    """Loads both images, shows their keypoints, matches them and shows the
    matches.

    Returns the match set, or None when matching failed. ImageLoadError is
    not handled here.
    """
    orig_img_a, img_a = load_image(config.image_path_a)
    orig_img_b, img_b = load_image(config.image_path_b)

    matcher = SIFTMatcher(config)

    feat_a = matcher.extract(img_a)
    feat_b = matcher.extract(img_b)
    logging.info(f'{config.image_path_a}: {len(feat_a)} keypoints')
    logging.info(f'{config.image_path_b}: {len(feat_b)} keypoints')

    for suffix, orig_img, feat in (('a', orig_img_a, feat_a), ('b', orig_img_b, feat_b)):
        try:
            img_keypoints = draw_keypoints(orig_img, feat.keypoints)
        except RenderError as e:
            logging.warning(f'skipping keypoint view {suffix}: {e}')
            continue
        show(
            f'{config.window_title} - keypoints {suffix}',
            img_keypoints,
            save_path=_save_path(config, f'keypoints_{suffix}.png'),
            display=config.display,
        )

    try:
        matches = matcher.match(feat_a.descriptors, feat_b.descriptors)
    except MatchError as e:
        logging.error(f'Matching failed: {e}')
        return None

    logging.info(f'{len(matches)} matches ({config.match_mode})')

    drawn = sorted(matches, key=lambda x: x.distance)
    if config.corresp_n != -1:
        drawn = drawn[:config.corresp_n]

    try:
        img_matches = draw_matches(orig_img_a, feat_a.keypoints, orig_img_b, feat_b.keypoints, drawn)
    except RenderError as e:
        logging.warning(f'skipping match view: {e}')
    else:
        show(
            f'{config.window_title} - matches',
            img_matches,
            save_path=_save_path(config, 'matches.png'),
            display=config.display,
        )

    return matches


def get_parser():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        '--path-a',
        help="Defines the file path to the first image.",
        type=str,
        default='img1.png'
    )
    parser.add_argument(
        '--path-b',
        help="Defines the file path to the second image.",
        type=str,
        default='img2.png'
    )
    parser.add_argument(
        '--k',
        help="Defines the number of neighbours searched per descriptor.",
        type=int,
        default=2
    )
    parser.add_argument(
        '--ratio',
        help="Defines the ratio test threshold.",
        type=float,
        default=0.75
    )
    parser.add_argument(
        '--match-mode',
        help="Defines the matching strategy.",
        type=str,
        choices=['knn', 'distance'],
        default='knn',
    )
    parser.add_argument(
        '--max-distance',
        help="Defines the distance threshold used by the 'distance' match mode.",
        type=float,
        default=250.0
    )
    parser.add_argument(
        '--corresp-n',
        help="Defines the number of correspondences drawn, -1 draws all.",
        type=int,
        default=-1
    )
    parser.add_argument(
        '--window-title',
        help="Defines the title prefix of the figures.",
        type=str,
        default='Correspondences'
    )
    parser.add_argument('--n-features', type=int, default=0)
    parser.add_argument('--n-octave-layers', type=int, default=3)
    parser.add_argument('--contrast-threshold', type=float, default=0.04)
    parser.add_argument('--edge-threshold', type=float, default=10.0)
    parser.add_argument('--sigma', type=float, default=1.6)
    parser.add_argument(
        '--save-dir',
        help="Defines the directory the rendered figures are written to.",
        type=str,
        default=None
    )
    parser.add_argument(
        '--no-display',
        help="Disables the interactive figures.",
        action='store_true',
    )
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
    )
    return parser


def main(args):
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(message)s',
    )

    config = VizConfig.from_args(args)
    logging.debug(f'config: {config}')

    try:
        return run(config)
    except ImageLoadError as e:
        logging.error(str(e))
        raise SystemExit(1)


if __name__ == '__main__':
    args = get_parser().parse_args()

    main(args)
