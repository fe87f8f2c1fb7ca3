"""
Telemetry Agent - Sensors Probe

IIO devices: stk3310 light/proximity (device0), af8133j magnetometer
(device1), SARADC (device2) and mpu6500 IMU (device3).
"""

import math
from typing import Any, Dict, List, Optional

from .sysfs import read_float, read_int

IIO = "/sys/bus/iio/devices"
ALS = f"{IIO}/iio:device0"
MAG = f"{IIO}/iio:device1"
ADC = f"{IIO}/iio:device2"
IMU = f"{IIO}/iio:device3"
ADC_CHANNELS = range(6)


def _vector(base: str, prefix: str) -> Dict[str, int]:
    return {axis: read_int(f"{base}/in_{prefix}_{axis}_raw") or 0 for axis in ("x", "y", "z")}


def _scaled(raw: Dict[str, int], scale: float) -> Dict[str, float]:
    return {axis: value * scale for axis, value in raw.items()}


def _magnitude(v: Dict[str, float]) -> float:
    return math.sqrt(v["x"] ** 2 + v["y"] ** 2 + v["z"] ** 2)


def _scale(path: str) -> float:
    value: Optional[float] = read_float(path)
    return value if value is not None else 1.0


def default_sensors() -> Dict[str, Any]:
    zero = {"x": 0, "y": 0, "z": 0}
    return {
        "ambient_light": {"illuminance_raw": 0, "illuminance_scale": 1.0, "illuminance_lux": 0.0},
        "proximity": {"proximity_raw": 0, "proximity_scale": 1.0, "near_level": 100, "is_near": False},
        "accelerometer": {"raw": dict(zero), "scale": 1.0, "acceleration": dict(zero), "magnitude": 0.0},
        "gyroscope": {"raw": dict(zero), "scale": 1.0, "angular_velocity": dict(zero), "magnitude": 0.0},
        "magnetometer": {"raw": dict(zero), "scale": 1.0, "magnetic_field": dict(zero), "heading": 0.0},
        "adc_channels": [],
    }


def _adc_channels() -> List[Dict[str, Any]]:
    scale = _scale(f"{ADC}/in_voltage_scale")
    channels = []
    for channel in ADC_CHANNELS:
        raw = read_int(f"{ADC}/in_voltage{channel}_raw")
        if raw is not None:
            channels.append({"channel": channel, "raw": raw, "scale": scale, "voltage": raw * scale})
    return channels


def collect_sensors() -> Dict[str, Any]:
    illuminance_raw = read_int(f"{ALS}/in_illuminance_raw") or 0
    illuminance_scale = _scale(f"{ALS}/in_illuminance_scale")

    proximity_raw = read_int(f"{ALS}/in_proximity_raw") or 0
    near_level = read_int(f"{ALS}/in_proximity_nearlevel")
    near_level = 100 if near_level is None else near_level

    accel_raw = _vector(IMU, "accel")
    accel_scale = _scale(f"{IMU}/in_accel_scale")
    acceleration = _scaled(accel_raw, accel_scale)

    gyro_raw = _vector(IMU, "anglvel")
    gyro_scale = _scale(f"{IMU}/in_anglvel_scale")
    angular_velocity = _scaled(gyro_raw, gyro_scale)

    mag_raw = _vector(MAG, "magn")
    mag_scale = _scale(f"{MAG}/in_magn_scale")
    field = _scaled(mag_raw, mag_scale)
    heading = math.degrees(math.atan2(field["y"], field["x"])) % 360

    return {
        "ambient_light": {
            "illuminance_raw": illuminance_raw,
            "illuminance_scale": illuminance_scale,
            "illuminance_lux": illuminance_raw * illuminance_scale,
        },
        "proximity": {
            "proximity_raw": proximity_raw,
            "proximity_scale": _scale(f"{ALS}/in_proximity_scale"),
            "near_level": near_level,
            "is_near": proximity_raw > near_level,
        },
        "accelerometer": {
            "raw": accel_raw,
            "scale": accel_scale,
            "acceleration": acceleration,
            "magnitude": _magnitude(acceleration),
        },
        "gyroscope": {
            "raw": gyro_raw,
            "scale": gyro_scale,
            "angular_velocity": angular_velocity,
            "magnitude": _magnitude(angular_velocity),
        },
        "magnetometer": {
            "raw": mag_raw,
            "scale": mag_scale,
            "magnetic_field": field,
            "heading": heading,
        },
        "adc_channels": _adc_channels(),
    }
