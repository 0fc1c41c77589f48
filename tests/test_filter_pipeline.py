from concurrent.futures import ThreadPoolExecutor
import numpy as np
import pytest

from imagelab.errors import InvalidParameter, UnsupportedFilter
from imagelab.models.filter_catalog import FilterName
from imagelab.models.filter_request import FilterRequest
from imagelab.models.raster_buffer import RasterBuffer
from imagelab.pipeline.filter_pipeline import apply_filter
from imagelab.services.filter_service import FilterService
from imagelab.services.matrix_scope import DEFAULT_REGISTRY
from imagelab.services.result_encoder import ResultEncoder

PNG = ResultEncoder("PNG")


def run(image, request, registry=None):
    return apply_filter(image, request, encoder=PNG, registry=registry)


def dot_image(channels=1):
    """Black 9x9 image with a single white pixel in the centre."""
    pixels = np.zeros((9, 9), dtype=np.uint8)
    pixels[4, 4] = 255
    if channels > 1:
        pixels = np.dstack([pixels] * channels)
    return RasterBuffer(pixels)


def test_no_filter_is_identity(make_image, registry):
    img = make_image(channels=4)
    result = run(img, FilterRequest("noFilter"), registry)

    assert np.array_equal(result.buffer.pixels, img.pixels)
    assert not np.shares_memory(result.buffer.pixels, img.pixels)
    assert registry.live_count() == 0


def test_gaussian_even_kernel_matches_next_odd(make_image, registry):
    img = make_image(64, 48)
    coerced = run(img, FilterRequest("GaussianBlur", {"ksizeX": 4, "sigmaX": 0}), registry)
    explicit = run(img, FilterRequest("GaussianBlur", {"ksizeX": 5, "sigmaX": 0}), registry)
    smaller = run(img, FilterRequest("GaussianBlur", {"ksizeX": 3, "sigmaX": 0}), registry)

    assert np.array_equal(coerced.buffer.pixels, explicit.buffer.pixels)
    assert not np.array_equal(coerced.buffer.pixels, smaller.buffer.pixels)


def test_unknown_filter_allocates_nothing(make_image):
    img = make_image()
    baseline = DEFAULT_REGISTRY.live_count()

    with pytest.raises(UnsupportedFilter):
        run(img, FilterRequest("doesNotExist"))

    assert DEFAULT_REGISTRY.live_count() == baseline


def test_filter_without_runner_is_unsupported(make_image, registry):
    service = FilterService()
    service._runners.pop(FilterName.BLUR)

    with pytest.raises(UnsupportedFilter):
        apply_filter(make_image(), FilterRequest("blur"), filter_service=service, encoder=PNG, registry=registry)
    assert registry.live_count() == 0


@pytest.mark.parametrize("channels", [1, 3, 4])
@pytest.mark.parametrize("name", list(FilterName))
def test_every_filter_keeps_geometry(make_image, registry, name, channels):
    img = make_image(40, 30, channels)
    result = run(img, FilterRequest(name), registry)

    assert result.buffer.pixels.shape == img.pixels.shape
    assert result.buffer.pixels.dtype == np.uint8
    assert registry.live_count() == 0


def test_bilateral_keeps_alpha(make_image, registry):
    img = make_image(channels=4)
    result = run(img, FilterRequest("bilateralFilter", {"d": 7}), registry)
    assert np.array_equal(result.buffer.pixels[:, :, 3], img.pixels[:, :, 3])


def test_blur_of_constant_image_is_constant(registry):
    img = RasterBuffer(np.full((12, 12, 3), 77, dtype=np.uint8))
    for name in ("blur", "boxFilter", "GaussianBlur", "medianBlur"):
        assert np.all(run(img, FilterRequest(name), registry).buffer.pixels == 77)


def test_dilate_grows_and_erode_removes_a_dot(registry):
    img = dot_image()
    dilated = run(img, FilterRequest("dilate", {"ksizeX": 3, "ksizeY": 3}), registry).buffer.pixels
    eroded = run(img, FilterRequest("erode", {"ksizeX": 3, "ksizeY": 3}), registry).buffer.pixels

    assert np.all(dilated[3:6, 3:6] == 255)
    assert dilated.sum() == 9 * 255
    assert not eroded.any()


def test_median_removes_salt_noise(registry):
    result = run(dot_image(3), FilterRequest("medianBlur", {"ksize": 3}), registry)
    assert not result.buffer.pixels.any()


def test_sobel_finds_vertical_edge(edge_image, registry):
    result = run(edge_image, FilterRequest("Sobel", {"dx": 1, "dy": 0, "ksize": "3"}), registry).buffer.pixels

    assert result.shape == edge_image.pixels.shape
    assert result[:, 9:11].min() > 0
    assert not result[:, :8].any()
    assert np.array_equal(result[:, :, 0], result[:, :, 2])


def test_scharr_vertical_derivative_ignores_vertical_edge(edge_image, registry):
    result = run(edge_image, FilterRequest("Scharr", {"dx": 0, "dy": 1}), registry)
    assert not result.buffer.pixels.any()


def test_laplacian_of_flat_image_is_zero(registry):
    img = RasterBuffer(np.full((10, 10), 128, dtype=np.uint8))
    assert not run(img, FilterRequest("Laplacian", {"ksize": "5"}), registry).buffer.pixels.any()


def test_sep_filter_identity_kernels(make_image, registry):
    img = make_image(16, 12, 3)

    unit = run(img, FilterRequest("sepFilter2D", {"kernelX": "1", "kernelY": "1"}), registry).buffer.pixels
    shifted = run(img, FilterRequest("sepFilter2D", {"kernelX": "3", "kernelY": "3"}), registry).buffer.pixels

    assert np.array_equal(unit, img.pixels)
    assert np.array_equal(shifted[1:, 1:], img.pixels[:-1, :-1])


def test_grayscale_request_keeps_channel_count(make_image, registry):
    img = make_image(channels=3)
    result = run(img, FilterRequest("noFilter", grayscale_requested=True), registry).buffer.pixels

    assert result.shape == img.pixels.shape
    assert np.array_equal(result[:, :, 0], result[:, :, 1])


def test_out_of_domain_parameter_names_the_offender():
    with pytest.raises(InvalidParameter) as excinfo:
        FilterRequest("medianBlur", {"ksize": 4})
    assert (excinfo.value.name, excinfo.value.value) == ("ksize", 4)


def test_filters_run_concurrently(make_image, registry):
    images = [make_image(20 + i, 20) for i in range(6)]
    request = FilterRequest("GaussianBlur", {"ksizeX": 7, "ksizeY": 7, "sigmaX": 2.0})
    expected = [run(img, request, registry).buffer.pixels for img in images]

    with ThreadPoolExecutor(max_workers=3) as pool:
        results = list(pool.map(lambda img: run(img, request, registry).buffer.pixels, images))

    for got, want in zip(results, expected):
        assert np.array_equal(got, want)
    assert registry.live_count() == 0
