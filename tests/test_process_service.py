import numpy as np
import pytest

from luma_converter.models.errors import ConversionError, ShapeMismatchError
from luma_converter.models.image_model import PixelBuffer
from luma_converter.services.process_service import (
    ProcessService,
    run_grayscale_routine,
    to_grayscale_rgba,
)


@pytest.fixture
def service() -> ProcessService:
    return ProcessService()


def test_red_and_green_pixels_use_truncating_luma(service):
    src = PixelBuffer(width=2, height=1, data=bytes([255, 0, 0, 255, 0, 255, 0, 255]))

    out = service.transform(src)

    assert list(out.data) == [76, 76, 76, 255, 149, 149, 149, 255]


def test_transparent_black_stays_transparent_black(service):
    src = PixelBuffer(width=1, height=1, data=bytes([0, 0, 0, 0]))

    assert list(service.transform(src).data) == [0, 0, 0, 0]


def test_blue_and_white_pixels(service):
    src = PixelBuffer(width=2, height=1, data=bytes([0, 0, 255, 128, 255, 255, 255, 10]))

    # 0.114 * 255 = 29.07
    assert list(service.transform(src).data) == [29, 29, 29, 128, 255, 255, 255, 10]


@pytest.mark.parametrize("width,height", [(1, 1), (3, 2), (7, 5), (16, 9)])
def test_shape_and_alpha_preserved(service, make_buffer, width, height):
    src = make_buffer(width, height, seed=width * 31 + height)

    out = service.transform(src)

    assert (out.width, out.height) == (width, height)
    assert len(out.data) == len(src.data)
    assert out.data[3::4] == src.data[3::4]


def test_every_pixel_is_gray(service, random_buffer):
    out = service.transform(random_buffer)

    assert service.is_grayscale(out)
    arr = np.frombuffer(out.data, dtype=np.uint8).reshape(-1, 4)
    assert np.array_equal(arr[:, 0], arr[:, 1])
    assert np.array_equal(arr[:, 1], arr[:, 2])


def test_transform_is_pure(service, random_buffer):
    before = bytes(random_buffer.data)

    first = service.transform(random_buffer)
    second = service.transform(random_buffer)

    assert first == second
    assert random_buffer.data == before


def test_ndarray_input_is_not_mutated():
    arr = np.array([10, 200, 30, 255], dtype=np.uint8)

    out = to_grayscale_rgba(arr, 1, 1)

    assert list(arr) == [10, 200, 30, 255]
    assert out is not arr
    assert list(out) == [int(0.299 * 10 + 0.587 * 200 + 0.114 * 30)] * 3 + [255]


def test_transform_is_idempotent(service, random_buffer):
    once = service.transform(random_buffer)

    assert service.transform(once) == once


def test_every_gray_level_maps_to_itself():
    levels = np.arange(256, dtype=np.uint8)
    flat = np.stack([levels, levels, levels, levels], axis=1).reshape(-1)

    out = to_grayscale_rgba(flat, 256, 1)

    assert np.array_equal(out, flat)


def test_exact_integer_luma_is_not_truncated_down():
    # 0.299*100 + 0.587*100 + 0.114*100 == 100 exactly in decimal
    out = to_grayscale_rgba(bytes([100, 100, 100, 255]), 1, 1)

    assert list(out) == [100, 100, 100, 255]


@pytest.mark.parametrize(
    "length,width,height",
    [(7, 1, 2), (12, 2, 2), (20, 2, 2), (0, 1, 1)],
)
def test_length_mismatch_reports_expected_and_actual(service, length, width, height):
    src = PixelBuffer(width=width, height=height, data=bytes(length))

    with pytest.raises(ShapeMismatchError) as excinfo:
        service.transform(src)

    assert excinfo.value.expected == width * height * 4
    assert excinfo.value.actual == length
    assert isinstance(excinfo.value, ConversionError)


def test_non_positive_dimensions_rejected():
    with pytest.raises(ShapeMismatchError):
        to_grayscale_rgba(b"", 0, 0)


def test_negative_dimensions_report_zero_expected_length():
    with pytest.raises(ShapeMismatchError) as excinfo:
        to_grayscale_rgba(bytes(4), -1, -1)

    assert (excinfo.value.expected, excinfo.value.actual) == (0, 4)
    assert "expected 0" in str(excinfo.value)


def test_routine_checks_byte_length_tag():
    payload = bytes([1, 2, 3, 4])

    with pytest.raises(ConversionError, match="tagged 8 bytes"):
        run_grayscale_routine(payload, 8, 1, 1)

    assert list(run_grayscale_routine(payload, 4, 1, 1))[3] == 4
