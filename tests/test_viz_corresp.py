import os

import cv2
import numpy as np
import pytest

import viz_corresp
from correspondences.errors import ImageLoadError, RenderError
from viz_corresp import VizConfig, get_parser, load_image, main, run


def test_load_missing_image(tmp_path):
    with pytest.raises(ImageLoadError):
        load_image(str(tmp_path / 'missing.png'))


def test_load_image_returns_rgb_and_gray(image_pair):
    orig_img, gray_img = load_image(image_pair[0])

    assert orig_img.shape == (240, 320, 3)
    assert gray_img.shape == (240, 320)


def test_config_from_args():
    args = get_parser().parse_args(
        ['--path-a', 'x.png', '--path-b', 'y.png', '--ratio', '0.6', '--no-display']
    )

    config = VizConfig.from_args(args)

    assert config.image_path_a == 'x.png'
    assert config.image_path_b == 'y.png'
    assert config.ratio == 0.6
    assert config.k == 2
    assert config.display is False
    assert config.save_dir is None


def test_run_saves_figures(image_pair, tmp_path):
    save_dir = tmp_path / 'out'
    config = VizConfig(
        image_path_a=image_pair[0],
        image_path_b=image_pair[1],
        display=False,
        save_dir=str(save_dir),
        corresp_n=20,
    )

    matches = run(config)

    assert len(matches) > 10
    for name in ('keypoints_a.png', 'keypoints_b.png', 'matches.png'):
        assert os.path.isfile(save_dir / name)


def test_run_distance_mode(image_pair):
    config = VizConfig(
        image_path_a=image_pair[0],
        image_path_b=image_pair[1],
        display=False,
        match_mode='distance',
        max_distance=100.0,
    )

    matches = run(config)

    assert len(matches) > 0
    assert all(m.distance < 100.0 for m in matches)


def test_run_stops_gracefully_when_matching_fails(image_pair, tmp_path):
    blank = tmp_path / 'blank.png'
    cv2.imwrite(str(blank), np.zeros((64, 64, 3), dtype=np.uint8))
    save_dir = tmp_path / 'out'
    config = VizConfig(
        image_path_a=image_pair[0],
        image_path_b=str(blank),
        display=False,
        save_dir=str(save_dir),
    )

    assert run(config) is None
    assert not os.path.exists(save_dir / 'matches.png')


def test_run_continues_after_render_error(image_pair, monkeypatch):
    def broken_draw(*args):
        raise RenderError('broken')

    monkeypatch.setattr(viz_corresp, 'draw_keypoints', broken_draw)
    monkeypatch.setattr(viz_corresp, 'draw_matches', broken_draw)
    config = VizConfig(image_path_a=image_pair[0], image_path_b=image_pair[1], display=False)

    matches = run(config)

    assert len(matches) > 10


def test_main_exits_on_missing_image(tmp_path):
    args = get_parser().parse_args(
        ['--path-a', str(tmp_path / 'nope.png'), '--path-b', str(tmp_path / 'nope2.png'), '--no-display']
    )

    with pytest.raises(SystemExit) as exc_info:
        main(args)

    assert exc_info.value.code == 1


def test_main_returns_matches(image_pair):
    args = get_parser().parse_args(
        ['--path-a', image_pair[0], '--path-b', image_pair[1], '--no-display', '--log-level', 'DEBUG']
    )

    matches = main(args)

    assert len(matches) > 10
