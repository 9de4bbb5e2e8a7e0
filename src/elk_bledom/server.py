"""MCP server entry point for ELK-BLEDOM LED strips.

Exposes the controller as tools and the effect table as a resource via the
Model Context Protocol, using the official Python MCP SDK with stdio
transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .controller import BleLedController
from .errors import ElkBledomError
from .models.effects import EFFECTS
from .models.schedule import ScheduleDirection, parse_days
from .protocol.commands import encode_effect_speed
from .protocol.variants import DeviceVariant
from .transport.ble_connection import SCAN_TIMEOUT, BleakTransport

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "elk-bledom",
    instructions="Control ELK-BLEDOM style Bluetooth LED strips",
)

# Global connection state
_controller: BleLedController | None = None


def _get_controller() -> BleLedController:
    """Get the active controller, raising if not connected."""
    if _controller is None or not _controller.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _controller


async def _run(action, result: dict[str, Any]) -> dict[str, Any]:
    try:
        await action
    except ElkBledomError as e:
        return {"error": str(e)}
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
async def connect(
    address: str | None = None,
    fallback_variant: str | None = None,
) -> dict[str, Any]:
    """Scan for an LED strip controller and connect to it.

    Args:
        address: Optional MAC address or platform id. Defaults to the
            ELKBLEDOM_ADDRESS environment variable, then to the first
            compatible device found.
        fallback_variant: Variant to assume when the advertised name is
            not recognised (ELK-BLE, LEDBLE, MELK, ELK-BULB, ELK-LAMPL).
    """
    global _controller
    if _controller is not None and _controller.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "variant": _controller.device_type_name,
        }

    fallback = None
    if fallback_variant:
        try:
            fallback = DeviceVariant(fallback_variant.upper())
        except ValueError:
            return {
                "error": f"Unknown variant '{fallback_variant}'. "
                         f"Valid: {[v.value for v in DeviceVariant]}"
            }

    transport = BleakTransport(
        address=address or os.environ.get("ELKBLEDOM_ADDRESS") or None,
        scan_timeout=SCAN_TIMEOUT,
    )
    controller = BleLedController(transport, fallback_variant=fallback)
    try:
        await controller.connect()
    except ElkBledomError as e:
        return {"connected": False, "error": str(e)}

    _controller = controller
    identity = controller.identity
    return {
        "connected": True,
        "variant": controller.device_type_name,
        "name": identity.name,
        "address": identity.address,
    }


@mcp.tool()
async def disconnect() -> dict[str, bool]:
    """Close the Bluetooth connection to the LED strip."""
    global _controller
    if _controller is None:
        return {"disconnected": True}
    await _controller.close()
    _controller = None
    return {"disconnected": True}


@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Report the connected device and the last values written to it."""
    ctrl = _get_controller()
    identity = ctrl.identity
    return {
        "variant": ctrl.device_type_name,
        "name": identity.name,
        "address": identity.address,
        "is_on": ctrl.is_on,
        "rgb_color": ctrl.rgb_color,
        "brightness": ctrl.brightness,
        "effect": ctrl.effect.name.lower() if ctrl.effect is not None else None,
        "effect_speed": ctrl.effect_speed,
        "color_temp_kelvin": ctrl.color_temp_kelvin,
    }


# ─── LIGHT TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
async def power(on: bool) -> dict[str, Any]:
    """Turn the LED strip on or off."""
    ctrl = _get_controller()
    action = ctrl.power_on() if on else ctrl.power_off()
    return await _run(action, {"on": on})


@mcp.tool()
async def set_color(red: int, green: int, blue: int) -> dict[str, Any]:
    """Set a static RGB color.

    Args:
        red: 0-255.
        green: 0-255.
        blue: 0-255.
    """
    ctrl = _get_controller()
    return await _run(
        ctrl.set_color(red, green, blue), {"rgb_color": [red, green, blue]}
    )


@mcp.tool()
async def set_brightness(level: int) -> dict[str, Any]:
    """Set brightness.

    Args:
        level: Brightness percentage 0-100.
    """
    ctrl = _get_controller()
    return await _run(ctrl.set_brightness(level), {"brightness": level})


@mcp.tool()
async def set_color_temperature(kelvin: int) -> dict[str, Any]:
    """Switch to white light at a color temperature.

    Args:
        kelvin: 2700 (warm) to 6500 (cool).
    """
    ctrl = _get_controller()
    return await _run(
        ctrl.set_color_temperature(kelvin), {"color_temp_kelvin": kelvin}
    )


@mcp.tool()
async def set_effect(effect: str, speed: int | None = None) -> dict[str, Any]:
    """Start a built-in effect program.

    Args:
        effect: Effect name, e.g. 'crossfade_red_green_blue' or 'blink_white'.
            See the elkbledom://catalog/effects resource.
        speed: Optional effect speed 0-100.
    """
    ctrl = _get_controller()

    async def _apply():
        if speed is not None:
            # Reject a bad speed before the effect frame goes out.
            encode_effect_speed(ctrl.variant, speed)
        await ctrl.set_effect(effect)
        if speed is not None:
            await ctrl.set_effect_speed(speed)

    result: dict[str, Any] = {"effect": effect}
    if speed is not None:
        result["speed"] = speed
    return await _run(_apply(), result)


@mcp.tool()
async def set_effect_speed(speed: int) -> dict[str, Any]:
    """Change the speed of the running effect.

    Args:
        speed: 0 (slowest) to 100 (fastest).
    """
    ctrl = _get_controller()
    return await _run(ctrl.set_effect_speed(speed), {"speed": speed})


# ─── SCHEDULE & CLOCK TOOLS ───────────────────────────────────────────

@mcp.tool()
async def set_schedule(
    direction: str,
    days: str,
    hour: int,
    minute: int,
    enabled: bool = True,
) -> dict[str, Any]:
    """Program the device's built-in on or off timer.

    Args:
        direction: 'on' or 'off'.
        days: Comma-separated days ('mon,thu'), or 'all', 'weekdays',
            'weekend', 'none'.
        hour: 0-23.
        minute: 0-59.
        enabled: Whether the timer is active.
    """
    ctrl = _get_controller()
    try:
        sched_dir = ScheduleDirection[direction.strip().upper()]
    except KeyError:
        return {"error": f"Direction must be 'on' or 'off', got '{direction}'"}
    try:
        mask = parse_days(days)
    except ElkBledomError as e:
        return {"error": str(e)}

    if sched_dir is ScheduleDirection.ON:
        action = ctrl.set_schedule_on(mask, hour, minute, enabled)
    else:
        action = ctrl.set_schedule_off(mask, hour, minute, enabled)
    return await _run(action, {
        "direction": sched_dir.name.lower(),
        "days": int(mask),
        "time": f"{hour:02d}:{minute:02d}",
        "enabled": enabled,
    })


@mcp.tool()
async def set_time(
    hour: int | None = None,
    minute: int | None = None,
    second: int = 0,
    day_of_week: int | None = None,
) -> dict[str, Any]:
    """Set the device clock. Without arguments, syncs to the host clock.

    Args:
        hour: 0-23.
        minute: 0-59.
        second: 0-59.
        day_of_week: 1 (Monday) to 7 (Sunday).
    """
    ctrl = _get_controller()
    if hour is None and minute is None and day_of_week is None:
        return await _run(ctrl.sync_time(), {"synced": True})
    if hour is None or minute is None or day_of_week is None:
        return {"error": "hour, minute and day_of_week are required together"}
    return await _run(
        ctrl.set_custom_time(hour, minute, second, day_of_week),
        {"time": f"{hour:02d}:{minute:02d}:{second:02d}", "day_of_week": day_of_week},
    )


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("elkbledom://catalog/effects")
def resource_effects() -> str:
    """All built-in effect programs with their protocol codes."""
    effects = [{"name": name, "code": f"0x{code:02X}"} for name, code in EFFECTS.items()]
    return json.dumps({"effects": effects})


@mcp.resource("elkbledom://catalog/variants")
def resource_variants() -> str:
    """Supported controller families."""
    return json.dumps({"variants": [v.value for v in DeviceVariant]})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=os.environ.get("ELKBLEDOM_LOG_LEVEL", "INFO").upper())
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
