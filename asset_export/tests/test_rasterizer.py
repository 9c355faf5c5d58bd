"""Tests for PillowRasterizer."""

import pytest
from PIL import Image

from asset_export.exceptions import InvalidCropAreaError, SurfaceAllocationError
from asset_export.export_request import CropArea
from asset_export.rasterizer import PillowRasterizer


class TestPillowRasterizer:
    """Tests for PillowRasterizer."""

    @pytest.fixture
    def rasterizer(self, logger):
        return PillowRasterizer(logger=logger)

    @pytest.fixture
    def quadrants(self):
        """200x100 source: left half red, right half blue."""
        img = Image.new('RGB', (200, 100), color=(255, 0, 0))
        img.paste((0, 0, 255), (100, 0, 200, 100))
        return img

    def test_scales_to_target(self, rasterizer, quadrants):
        surface = rasterizer.rasterize(quadrants, None, (400, 200))

        assert surface.size == (400, 200)
        assert surface is not quadrants

    def test_crop_region_only(self, rasterizer, quadrants):
        """Only pixels from the crop region reach the surface."""
        surface = rasterizer.rasterize(quadrants, CropArea(110, 10, 50, 50), (100, 100))

        assert surface.size == (100, 100)
        assert surface.getpixel((0, 0)) == (0, 0, 255)
        assert surface.getpixel((99, 99)) == (0, 0, 255)

    def test_crop_clamped(self, rasterizer, quadrants):
        """An overhanging crop is clamped to the source."""
        surface = rasterizer.rasterize(quadrants, CropArea(150, 50, 500, 500), (25, 25))

        assert surface.size == (25, 25)
        assert surface.getpixel((12, 12)) == (0, 0, 255)

    def test_crop_outside(self, rasterizer, quadrants):
        with pytest.raises(InvalidCropAreaError):
            rasterizer.rasterize(quadrants, CropArea(300, 0, 10, 10), (10, 10))

    def test_source_region(self, rasterizer, quadrants):
        assert rasterizer.source_region(quadrants, None) is None
        assert rasterizer.source_region(quadrants, CropArea(190, 90, 20, 20)) == CropArea(190, 90, 10, 10)

    @pytest.mark.parametrize('dims', [(0, 10), (10, 0)])
    def test_empty_surface(self, rasterizer, quadrants, dims):
        with pytest.raises(SurfaceAllocationError):
            rasterizer.rasterize(quadrants, None, dims)

    def test_surface_limit(self, quadrants, logger):
        """Surfaces over the pixel limit are refused before allocating."""
        rasterizer = PillowRasterizer(max_surface_pixels=1000, logger=logger)

        with pytest.raises(SurfaceAllocationError, match='pixel limit'):
            rasterizer.rasterize(quadrants, None, (100, 100))

    def test_out_of_memory(self, rasterizer, quadrants, mocker):
        mocker.patch.object(Image.Image, 'resize', side_effect=MemoryError())

        with pytest.raises(SurfaceAllocationError):
            rasterizer.rasterize(quadrants, None, (10, 10))

    @pytest.mark.parametrize('mode,expected', [
        ('L', 'RGB'),
        ('LA', 'RGBA'),
        ('CMYK', 'RGB'),
        ('RGBA', 'RGBA'),
    ])
    def test_color_modes(self, rasterizer, mode, expected):
        surface = rasterizer.rasterize(Image.new(mode, (10, 10)), None, (5, 5))

        assert surface.mode == expected

    def test_palette_with_transparency(self, rasterizer):
        img = Image.new('P', (10, 10))
        img.info['transparency'] = 0

        assert rasterizer.rasterize(img, None, (5, 5)).mode == 'RGBA'

    def test_converted_copy_closed(self, rasterizer, mocker):
        """The colour-converted copy is released once the surface is drawn."""
        source = Image.new('L', (10, 10))
        converted = Image.new('RGB', (10, 10))
        mocker.patch.object(rasterizer, '_convert_color_mode', return_value=converted)
        close = mocker.spy(converted, 'close')

        surface = rasterizer.rasterize(source, None, (5, 5))

        assert surface.size == (5, 5)
        close.assert_called_once()

    def test_source_not_closed(self, rasterizer, quadrants, mocker):
        close = mocker.spy(quadrants, 'close')

        rasterizer.rasterize(quadrants, None, (5, 5))

        close.assert_not_called()
        assert quadrants.getpixel((0, 0)) == (255, 0, 0)

    def test_invalid_crop_skips_conversion(self, rasterizer, mocker):
        convert = mocker.spy(rasterizer, '_convert_color_mode')

        with pytest.raises(InvalidCropAreaError):
            rasterizer.rasterize(Image.new('L', (10, 10)), CropArea(50, 50, 5, 5), (5, 5))

        convert.assert_not_called()
