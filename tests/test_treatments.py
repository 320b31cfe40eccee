import logging

import numpy as np
import pytest

from imgpipe.treatments import (
    Treatment,
    apply_treatment,
    available_treatments,
    canny_edges,
    gaussian_blur,
    is_known,
    mirror_horizontal,
    negative,
    rotate_90_clockwise,
    threshold,
    to_grayscale,
)


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(12, 17, 3), dtype=np.uint8)


@pytest.fixture
def step_image():
    img = np.zeros((20, 20, 3), dtype=np.uint8)
    img[:, 10:] = 255
    return img


def test_available_treatments_order():
    assert available_treatments() == [
        "Flou Gaussien",
        "Détection de Contours (Canny)",
        "Niveaux de Gris",
        "Rotation 90°",
        "Miroir Horizontal",
        "Seuillage",
        "Négatif",
    ]


def test_is_known():
    assert is_known("Négatif")
    assert not is_known("Sharpen")


def test_treatment_enum_lookup_by_name():
    assert Treatment("Seuillage") is Treatment.THRESHOLD


def test_rotate_four_times_is_identity(random_image):
    out = random_image
    for _ in range(4):
        out = rotate_90_clockwise(out)
    assert np.array_equal(out, random_image)


def test_rotate_swaps_dimensions_and_moves_corner(random_image):
    out = rotate_90_clockwise(random_image)
    assert out.shape == (17, 12, 3)
    # bottom-left corner becomes top-left after a clockwise turn
    assert np.array_equal(out[0, 0], random_image[-1, 0])


def test_mirror_twice_is_identity(random_image):
    out = mirror_horizontal(mirror_horizontal(random_image))
    assert np.array_equal(out, random_image)


def test_mirror_reverses_columns(random_image):
    out = mirror_horizontal(random_image)
    assert np.array_equal(out[:, 0], random_image[:, -1])


def test_negative_twice_is_identity(random_image):
    assert np.array_equal(negative(negative(random_image)), random_image)


def test_negative_sums_to_max():
    img = np.array([[[0, 128, 255], [1, 100, 254]]], dtype=np.uint8)
    out = negative(img)
    assert out.tolist() == [[[255, 127, 0], [254, 155, 1]]]


def test_negative_rejects_float():
    with pytest.raises(ValueError):
        negative(np.zeros((2, 2, 3), dtype=np.float32))


def test_grayscale_channels_equal(random_image):
    out = to_grayscale(random_image)
    assert out.shape == random_image.shape
    assert np.array_equal(out[..., 0], out[..., 1])
    assert np.array_equal(out[..., 1], out[..., 2])


def test_grayscale_keeps_neutral_grey():
    levels = np.arange(256, dtype=np.uint8)
    img = np.repeat(levels.reshape(16, 16, 1), 3, axis=2)
    out = to_grayscale(img)
    assert np.array_equal(out[..., 0], img[..., 0])


def test_grayscale_green_weighs_more_than_blue():
    blue = np.zeros((1, 1, 3), dtype=np.uint8)
    blue[..., 0] = 255
    green = np.zeros((1, 1, 3), dtype=np.uint8)
    green[..., 1] = 255
    assert to_grayscale(green)[0, 0, 0] > to_grayscale(blue)[0, 0, 0]


def test_grayscale_rejects_single_channel():
    with pytest.raises(ValueError):
        to_grayscale(np.zeros((4, 4), dtype=np.uint8))


def test_threshold_is_binary(random_image):
    out = threshold(random_image)
    assert set(np.unique(out)).issubset({0, 255})


def test_threshold_boundary_is_strict():
    at = np.full((1, 1, 3), 128, dtype=np.uint8)
    above = np.full((1, 1, 3), 129, dtype=np.uint8)
    assert threshold(at)[0, 0, 0] == 0
    assert threshold(above)[0, 0, 0] == 255


def test_blur_constant_image_unchanged():
    img = np.full((30, 25, 3), 77, dtype=np.uint8)
    out = gaussian_blur(img)
    assert out.dtype == np.uint8
    assert np.array_equal(out, img)


def test_blur_smooths_step(step_image):
    out = gaussian_blur(step_image)
    row = out[10, :, 0].astype(int)
    assert np.all(np.diff(row) >= 0)
    assert 0 < row[9] < 255
    assert 0 < row[10] < 255


def test_canny_constant_image_has_no_edges():
    img = np.full((15, 15, 3), 200, dtype=np.uint8)
    assert not canny_edges(img).any()


def test_canny_finds_vertical_step(step_image):
    out = canny_edges(step_image)
    assert out.shape == step_image.shape
    assert set(np.unique(out)).issubset({0, 255})
    cols = np.nonzero(out[..., 0].any(axis=0))[0]
    assert len(cols) > 0
    assert set(cols).issubset({9, 10})


def test_canny_channels_equal(step_image):
    out = canny_edges(step_image)
    assert np.array_equal(out[..., 0], out[..., 2])


def test_treatment_apply_matches_function(random_image):
    assert np.array_equal(Treatment.MIRROR.apply(random_image), mirror_horizontal(random_image))


def test_apply_treatment_unknown_name_returns_copy(random_image):
    out = apply_treatment("Inconnu", random_image)
    assert np.array_equal(out, random_image)
    assert out is not random_image


def test_apply_treatment_logs_and_keeps_image_on_failure(caplog):
    img = np.arange(16, dtype=np.uint8).reshape(4, 4)
    with caplog.at_level(logging.ERROR):
        out = apply_treatment("Niveaux de Gris", img)
    assert np.array_equal(out, img)
    assert "Erreur de traitement" in caplog.text


def test_apply_treatment_empty_image():
    img = np.zeros((0, 0, 3), dtype=np.uint8)
    assert apply_treatment("Négatif", img).size == 0


def test_apply_treatment_by_name(random_image):
    assert np.array_equal(apply_treatment("Négatif", random_image), negative(random_image))