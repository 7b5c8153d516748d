"""
Tests for calibrated measurements and unit conversion.

Run with: pytest tests/ -v
"""
from __future__ import annotations

import pytest

from core.measurement import (
    perpendicular_point,
    physical_distance,
    polygon_area,
    polyline_length,
    units_per_pixel,
)
from models.frame import CalibrationData, CalibrationScale
from models.units import UNIT_TO_MM, convert_length

WIDTH = 1000
HEIGHT = 500


@pytest.fixture
def calibration() -> CalibrationData:
    # 500 px reference segment measuring 100 mm
    return CalibrationData(start=(0.0, 0.5), end=(0.5, 0.5), real_world_distance=100.0)


class TestUnitsPerPixel:
    def test_from_reference(self, calibration):
        assert units_per_pixel(calibration, WIDTH, HEIGHT) == pytest.approx(0.2)

    def test_missing_calibration(self):
        assert units_per_pixel(None, WIDTH, HEIGHT) == 0.0

    def test_zero_width_raster(self, calibration):
        assert units_per_pixel(calibration, 0, HEIGHT) == 0.0

    def test_zero_length_reference(self):
        cal = CalibrationData(start=(0.3, 0.3), end=(0.3, 0.3), real_world_distance=10.0)
        assert units_per_pixel(cal, WIDTH, HEIGHT) == 0.0

    def test_calibration_scale(self, calibration):
        scale = CalibrationScale.from_reference(calibration, WIDTH, HEIGHT)
        assert scale.total_width_units == pytest.approx(200.0)
        assert scale.total_height_units == pytest.approx(100.0)

    def test_calibration_scale_degenerate(self):
        cal = CalibrationData(start=(0.3, 0.3), end=(0.3, 0.3), real_world_distance=10.0)
        assert CalibrationScale.from_reference(cal, WIDTH, HEIGHT) is None


class TestMeasurements:
    def test_physical_distance(self):
        assert physical_distance((0.0, 0.0), (0.0, 1.0), WIDTH, HEIGHT, 0.2) == pytest.approx(100.0)

    def test_polygon_area(self):
        square = [(0.0, 0.0), (0.1, 0.0), (0.1, 0.2), (0.0, 0.2)]
        # 100 x 100 px at 0.2 units per px
        assert polygon_area(square, WIDTH, HEIGHT, 0.2) == pytest.approx(400.0)

    def test_polygon_area_needs_three_points(self):
        assert polygon_area([(0.0, 0.0), (1.0, 1.0)], WIDTH, HEIGHT, 0.2) == 0.0

    def test_polyline_length(self):
        path = [(0.0, 0.0), (0.1, 0.0), (0.1, 0.2)]
        assert polyline_length(path, WIDTH, HEIGHT, 0.2) == pytest.approx(40.0)

    def test_perpendicular_point(self):
        foot = perpendicular_point((0.5, 0.5), (0.0, 0.0), (1.0, 0.0), WIDTH, HEIGHT)
        assert foot == pytest.approx((0.5, 0.0))

    def test_perpendicular_point_on_diagonal_uses_pixels(self):
        # In pixel space the diagonal runs at atan(500/1000), not 45 degrees
        foot = perpendicular_point((1.0, 0.0), (0.0, 0.0), (1.0, 1.0), WIDTH, HEIGHT)
        assert foot == pytest.approx((0.8, 0.8))

    def test_perpendicular_point_degenerate_line(self):
        l1 = (0.2, 0.2)
        assert perpendicular_point((0.5, 0.5), l1, (0.2, 0.2), WIDTH, HEIGHT) == l1


class TestUnits:
    def test_table(self):
        assert UNIT_TO_MM['in'] == 25.4
        assert set(UNIT_TO_MM) == {'mm', 'cm', 'm', 'in', 'ft', 'yd'}

    def test_convert(self):
        assert convert_length(1.0, 'in', 'mm') == pytest.approx(25.4)
        assert convert_length(3.0, 'ft', 'yd') == pytest.approx(1.0)
        assert convert_length(250.0, 'cm', 'm') == pytest.approx(2.5)

    def test_unknown_unit(self):
        with pytest.raises(ValueError, match="Unsupported unit"):
            convert_length(1.0, 'mm', 'furlong')


class TestCoreExports:
    def test_measurement_is_exported_from_core(self):
        import core

        assert core.measurement.units_per_pixel is units_per_pixel
        assert core.physical_distance is physical_distance
        assert core.measured_polygon_area is polygon_area
        assert core.measured_polyline_length is polyline_length
        assert 'measurement' in core.__all__
