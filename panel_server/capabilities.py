"""
Capability command builder.

Translates high-level lighting intents into the vendor's capability
descriptor. All numeric inputs are coerced and validated here; anything that
fails raises InvalidRequestError before a request is sent upstream.
"""
import math
from typing import Any, Dict, Union

from .errors import ConfigurationError, InvalidRequestError
from .models import CapabilityCommand

CAPABILITY_ON_OFF = "devices.capabilities.on_off"
CAPABILITY_RANGE = "devices.capabilities.range"
CAPABILITY_COLOR_SETTING = "devices.capabilities.color_setting"
CAPABILITY_DYNAMIC_SCENE = "devices.capabilities.dynamic_scene"

INSTANCE_POWER_SWITCH = "powerSwitch"
INSTANCE_BRIGHTNESS = "brightness"
INSTANCE_COLOR_RGB = "colorRgb"
INSTANCE_COLOR_TEMP = "colorTemperatureK"
INSTANCE_LIGHT_SCENE = "lightScene"
INSTANCE_DIY_SCENE = "diyScene"

COLOR_ENCODING_INT = "int"
COLOR_ENCODING_RGB = "rgb"
COLOR_ENCODINGS = (COLOR_ENCODING_INT, COLOR_ENCODING_RGB)

BRIGHTNESS_MIN = 1
BRIGHTNESS_MAX = 100
CHANNEL_MIN = 0
CHANNEL_MAX = 255

Number = Union[int, float]


def to_number(value: Any, field: str) -> Number:
    """
    Coerce a JSON value to a finite number.

    Accepts ints, floats and numeric strings. Booleans, None and anything
    non-numeric are rejected. Integral floats come back as ints.

    Raises:
        InvalidRequestError: If the value is missing, non-numeric or not finite
    """
    if value is None or isinstance(value, bool):
        raise InvalidRequestError(f"Missing or invalid {field}(number)")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise InvalidRequestError(f"Missing or invalid {field}(number)")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidRequestError(f"Missing or invalid {field}(number)")
    if not math.isfinite(number):
        raise InvalidRequestError(f"{field} must be a finite number")
    if number.is_integer():
        return int(number)
    return number


def power(on: Any) -> CapabilityCommand:
    if not isinstance(on, bool):
        raise InvalidRequestError("Missing or invalid on(boolean)")
    return CapabilityCommand(CAPABILITY_ON_OFF, INSTANCE_POWER_SWITCH, 1 if on else 0)


def brightness(value: Any) -> CapabilityCommand:
    level = to_number(value, "value")
    if not isinstance(level, int) or not BRIGHTNESS_MIN <= level <= BRIGHTNESS_MAX:
        raise InvalidRequestError(
            f"value must be an integer between {BRIGHTNESS_MIN} and {BRIGHTNESS_MAX}"
        )
    return CapabilityCommand(CAPABILITY_RANGE, INSTANCE_BRIGHTNESS, level)


def pack_rgb(r: int, g: int, b: int) -> int:
    """Pack three 8-bit channels into one 24-bit integer (0xRRGGBB)."""
    return (r << 16) | (g << 8) | b


def color(r: Any, g: Any, b: Any, encoding: str = COLOR_ENCODING_INT) -> CapabilityCommand:
    """
    Build a colorRgb command.

    Channels must be whole numbers in 0-255; out-of-range channels are
    rejected instead of being packed into neighbouring bytes.

    Args:
        r, g, b: Channel values from the request body
        encoding: "int" for a packed 24-bit value, "rgb" for {"r", "g", "b"}
    """
    channels: Dict[str, int] = {}
    for name, raw in (("r", r), ("g", g), ("b", b)):
        channel = to_number(raw, name)
        if not isinstance(channel, int) or not CHANNEL_MIN <= channel <= CHANNEL_MAX:
            raise InvalidRequestError(
                f"{name} must be an integer between {CHANNEL_MIN} and {CHANNEL_MAX}"
            )
        channels[name] = channel

    if encoding == COLOR_ENCODING_INT:
        value: Any = pack_rgb(channels["r"], channels["g"], channels["b"])
    elif encoding == COLOR_ENCODING_RGB:
        value = channels
    else:
        raise ConfigurationError(f"Unknown COLOR_ENCODING {encoding!r}")
    return CapabilityCommand(CAPABILITY_COLOR_SETTING, INSTANCE_COLOR_RGB, value)


def color_temperature(kelvin: Any) -> CapabilityCommand:
    k = to_number(kelvin, "kelvin")
    if k <= 0:
        raise InvalidRequestError("kelvin must be a positive number")
    return CapabilityCommand(CAPABILITY_COLOR_SETTING, INSTANCE_COLOR_TEMP, k)


def scene(value: Any, scene_type: Any = None) -> CapabilityCommand:
    """Preset scenes use lightScene; ``type: "diy"`` selects diyScene."""
    if value is None or value == "" or isinstance(value, bool):
        raise InvalidRequestError("Missing or invalid value(scene)")
    instance = INSTANCE_DIY_SCENE if scene_type == "diy" else INSTANCE_LIGHT_SCENE
    return CapabilityCommand(CAPABILITY_DYNAMIC_SCENE, instance, value)
