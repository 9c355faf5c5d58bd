"""Tests for ExportRequest and CropArea."""

import math

import pytest

from asset_export.exceptions import (
    InvalidCropAreaError,
    InvalidFormatError,
    InvalidQualityError,
    InvalidRequestError,
    InvalidScaleError,
)
from asset_export.export_request import CropArea, ExportRequest


def make_request(**changes):
    fields = dict(
        design_file_id='design-1',
        source_image_url='https://example.com/preview.png',
        name='logo',
        format='png',
    )
    fields.update(changes)
    return ExportRequest(**fields)


class TestCropArea:
    """Tests for CropArea."""

    def test_valid(self):
        """A non-negative origin with positive size validates."""
        CropArea(0, 0, 10, 10).validate()

    @pytest.mark.parametrize('crop', [
        CropArea(-1, 0, 10, 10),
        CropArea(0, -1, 10, 10),
        CropArea(0, 0, 0, 10),
        CropArea(0, 0, 10, -5),
        CropArea(0, 0, '10', 10),
    ])
    def test_invalid(self, crop):
        """Negative origins, empty sizes and non-numbers are rejected."""
        with pytest.raises(InvalidCropAreaError):
            crop.validate()

    def test_box(self):
        assert CropArea(10, 20, 30, 40).box == (10, 20, 40, 60)

    def test_clamp_inside(self):
        """A crop fully inside the source is unchanged."""
        crop = CropArea(10, 10, 50, 50)
        assert crop.clamp(100, 100) == crop

    def test_clamp_overhanging(self):
        """A crop overhanging the source is cut to the bounds."""
        assert CropArea(80, 90, 50, 50).clamp(100, 100) == CropArea(80, 90, 20, 10)

    def test_clamp_outside(self):
        """A crop entirely outside the source clamps to nothing."""
        assert CropArea(200, 200, 10, 10).clamp(100, 100) is None

    @pytest.mark.parametrize('field', ['x', 'y', 'width', 'height'])
    @pytest.mark.parametrize('value', [math.nan, math.inf])
    def test_non_finite(self, field, value):
        """NaN and infinite coordinates are rejected."""
        values = dict(x=0, y=0, width=10, height=10)
        values[field] = value

        with pytest.raises(InvalidCropAreaError, match='finite'):
            CropArea(**values).validate()

    def test_from_dict_missing_key(self):
        with pytest.raises(InvalidCropAreaError):
            CropArea.from_dict({'x': 0, 'y': 0, 'width': 10})


class TestExportRequestValidate:
    """Tests for ExportRequest.validate."""

    def test_valid(self):
        make_request(scale=2, quality=0.5, crop_area=CropArea(0, 0, 10, 10),
                     max_size_bytes=1000).validate()

    @pytest.mark.parametrize('field', ['design_file_id', 'source_image_url', 'name'])
    def test_required_fields(self, field):
        """Missing identifiers and names are rejected."""
        with pytest.raises(InvalidRequestError):
            make_request(**{field: ''}).validate()

    def test_blank_name(self):
        with pytest.raises(InvalidRequestError):
            make_request(name='   ').validate()

    def test_unknown_format(self):
        with pytest.raises(InvalidFormatError):
            make_request(format='gif').validate()

    @pytest.mark.parametrize('scale', [0, 4, 1.5, True])
    def test_unsupported_scale(self, scale):
        """Only 1, 2 and 3 are user-selectable scales."""
        with pytest.raises(InvalidScaleError):
            make_request(scale=scale).validate()

    @pytest.mark.parametrize('quality', [0.05, 1.5, 'high'])
    def test_invalid_quality(self, quality):
        with pytest.raises(InvalidQualityError):
            make_request(quality=quality).validate()

    @pytest.mark.parametrize('quality', [0.1, 1.0, 1])
    def test_quality_bounds_inclusive(self, quality):
        make_request(quality=quality).validate()

    def test_invalid_crop(self):
        with pytest.raises(InvalidCropAreaError):
            make_request(crop_area=CropArea(0, 0, 0, 0)).validate()

    @pytest.mark.parametrize('budget', [0, -1])
    def test_non_positive_budget(self, budget):
        with pytest.raises(InvalidRequestError):
            make_request(max_size_bytes=budget).validate()

    @pytest.mark.parametrize('budget', [math.nan, math.inf])
    def test_non_finite_budget(self, budget):
        with pytest.raises(InvalidRequestError):
            make_request(max_size_bytes=budget).validate()

    def test_integral_float_scale_normalised(self):
        """A scale of 2.0 is stored as the integer 2."""
        request = make_request(scale=2.0)

        request.validate()
        assert request.scale == 2
        assert isinstance(request.scale, int)

    def test_input_errors_are_value_errors(self):
        """Input errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            make_request(format='bmp').validate()


class TestExportRequestFromDict:
    """Tests for ExportRequest.from_dict."""

    def test_camel_case(self):
        """The JSON wire shape maps onto the fields."""
        request = ExportRequest.from_dict({
            'designFileId': 'design-1',
            'imageUrl': 'https://example.com/a.png',
            'name': 'hero',
            'format': 'jpg',
            'scale': 2,
            'quality': 0.7,
            'cropArea': {'x': 1, 'y': 2, 'width': 3, 'height': 4},
            'createdBy': 'user-1',
        })

        assert request.design_file_id == 'design-1'
        assert request.source_image_url == 'https://example.com/a.png'
        assert request.format == 'jpg'
        assert request.scale == 2
        assert request.quality == 0.7
        assert request.crop_area == CropArea(1, 2, 3, 4)
        assert request.created_by == 'user-1'
        assert request.max_size_bytes is None

    def test_snake_case(self):
        request = ExportRequest.from_dict({
            'design_file_id': 'design-1',
            'source_image_url': '/tmp/a.png',
            'name': 'hero',
            'format': 'png',
            'max_size_bytes': 2048,
        })

        assert request.source_image_url == '/tmp/a.png'
        assert request.max_size_bytes == 2048

    def test_scale_defaults_to_one(self):
        request = ExportRequest.from_dict({'designFileId': 'd', 'imageUrl': 'u', 'name': 'n', 'format': 'png'})
        assert request.scale == 1

    def test_max_size_kb(self):
        """maxSizeKB is converted to bytes."""
        request = ExportRequest.from_dict({
            'designFileId': 'd', 'imageUrl': 'u', 'name': 'n', 'format': 'png', 'maxSizeKB': 50,
        })
        assert request.max_size_bytes == 50 * 1024

    def test_max_size_bytes_wins_over_kb(self):
        request = ExportRequest.from_dict({
            'designFileId': 'd', 'imageUrl': 'u', 'name': 'n', 'format': 'png',
            'maxSizeBytes': 100, 'maxSizeKB': 50,
        })
        assert request.max_size_bytes == 100

    def test_scale_from_json_float(self):
        request = ExportRequest.from_dict({'designFileId': 'd', 'imageUrl': 'u', 'name': 'n',
                                           'format': 'png', 'scale': 3.0})

        assert request.scale == 3
        assert isinstance(request.scale, int)

    def test_max_size_kb_not_finite(self):
        with pytest.raises(InvalidRequestError):
            ExportRequest.from_dict({'name': 'n', 'format': 'png', 'maxSizeKB': math.nan})

    def test_nan_crop_from_dict(self):
        request = ExportRequest.from_dict({
            'designFileId': 'd', 'imageUrl': 'u', 'name': 'n', 'format': 'png',
            'cropArea': {'x': math.nan, 'y': 0, 'width': 10, 'height': 10},
        })

        with pytest.raises(InvalidCropAreaError):
            request.validate()

    def test_max_size_kb_not_a_number(self):
        with pytest.raises(InvalidRequestError):
            ExportRequest.from_dict({'name': 'n', 'format': 'png', 'maxSizeKB': 'big'})
