"""
Unit tests for the capability command builder.
"""
import pytest

from panel_server import capabilities
from panel_server.errors import ConfigurationError, InvalidRequestError
from panel_server.models import CapabilityCommand


class TestToNumber:
    """Tests for numeric coercion."""

    @pytest.mark.parametrize("raw, expected", [
        (50, 50),
        (50.0, 50),
        (12.5, 12.5),
        ("75", 75),
        (" 3000 ", 3000),
    ])
    def test_accepts_numbers_and_numeric_strings(self, raw, expected):
        value = capabilities.to_number(raw, "value")
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("raw", [None, True, False, "", "bright", [], {}, "nan", "inf", float("inf")])
    def test_rejects_missing_non_numeric_and_non_finite(self, raw):
        with pytest.raises(InvalidRequestError):
            capabilities.to_number(raw, "value")

    def test_error_names_the_field(self):
        with pytest.raises(InvalidRequestError, match="kelvin"):
            capabilities.to_number("warm", "kelvin")


def test_power_on_and_off():
    """Booleans map to 1/0 on powerSwitch."""
    assert capabilities.power(True) == CapabilityCommand("devices.capabilities.on_off", "powerSwitch", 1)
    assert capabilities.power(False).value == 0


@pytest.mark.parametrize("raw", [1, 0, "true", None])
def test_power_requires_boolean(raw):
    with pytest.raises(InvalidRequestError, match="on"):
        capabilities.power(raw)


def test_brightness():
    command = capabilities.brightness("40")
    assert command.type == "devices.capabilities.range"
    assert command.instance == "brightness"
    assert command.value == 40


@pytest.mark.parametrize("raw", [0, 101, 150, -5, 50.5, "50.5"])
def test_brightness_rejects_out_of_range_and_fractional(raw):
    with pytest.raises(InvalidRequestError):
        capabilities.brightness(raw)


class TestColor:
    """Tests for RGB color encoding."""

    def test_packs_red_into_24_bit_integer(self):
        command = capabilities.color(255, 0, 0)
        assert command == CapabilityCommand("devices.capabilities.color_setting", "colorRgb", 16711680)

    def test_packs_all_channels(self):
        assert capabilities.color(0x12, 0x34, 0x56).value == 0x123456
        assert capabilities.color(255, 255, 255).value == 0xFFFFFF
        assert capabilities.color(0, 0, 0).value == 0

    def test_structured_encoding(self):
        command = capabilities.color(10, 20, 30, encoding="rgb")
        assert command.instance == "colorRgb"
        assert command.value == {"r": 10, "g": 20, "b": 30}

    def test_accepts_integral_floats_and_strings(self):
        assert capabilities.color(255.0, "128", 0).value == (255 << 16) | (128 << 8)

    @pytest.mark.parametrize("r, g, b", [
        (300, 0, 0),
        (0, -1, 0),
        (0, 0, 256),
        (12.5, 0, 0),
    ])
    def test_rejects_out_of_range_channels(self, r, g, b):
        with pytest.raises(InvalidRequestError):
            capabilities.color(r, g, b)

    def test_rejects_missing_channel(self):
        with pytest.raises(InvalidRequestError, match="b"):
            capabilities.color(1, 2, None)

    def test_unknown_encoding(self):
        with pytest.raises(ConfigurationError, match="COLOR_ENCODING"):
            capabilities.color(1, 2, 3, encoding="hsv")


def test_color_temperature():
    command = capabilities.color_temperature(4000)
    assert command == CapabilityCommand("devices.capabilities.color_setting", "colorTemperatureK", 4000)


@pytest.mark.parametrize("raw", [0, -2700, "hot", None])
def test_color_temperature_rejects_bad_kelvin(raw):
    with pytest.raises(InvalidRequestError):
        capabilities.color_temperature(raw)


class TestScene:
    """Tests for scene selection."""

    def test_preset_scene_by_default(self):
        command = capabilities.scene("sunrise")
        assert command.type == "devices.capabilities.dynamic_scene"
        assert command.instance == "lightScene"
        assert command.value == "sunrise"

    def test_diy_scene(self):
        assert capabilities.scene("my-scene", "diy").instance == "diyScene"

    def test_unknown_type_falls_back_to_preset(self):
        assert capabilities.scene("sunrise", "preset").instance == "lightScene"

    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_value(self, raw):
        with pytest.raises(InvalidRequestError):
            capabilities.scene(raw)


def test_brightness_accepts_integral_float():
    assert capabilities.brightness(50.0).value == 50
