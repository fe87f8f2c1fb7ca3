"""
Telemetry Agent - Probe Tests

sysfs-backed probes are pointed at a fake tree under tmp_path.
"""

import pytest

from telemetry_agent.config import AgentSettings
from telemetry_agent.models import Tier
from telemetry_agent.probes import build_probes, sysfs
from telemetry_agent.probes import gpu, power, system, thermal
from telemetry_agent.probes.network import interface_type
from telemetry_agent.probes.storage import device_type


def write_tree(root, files):
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


class TestSysfsReaders:
    """Test tolerant attribute readers."""

    def test_read_values(self, tmp_path):
        write_tree(tmp_path, {
            "capacity": "80\n",
            "status": "Charging\n",
            "scale": "0.000598\n",
            "present": "1\n",
            "freqs": "200000000 300000000 bogus 400000000\n",
        })

        assert sysfs.read_int(str(tmp_path / "capacity")) == 80
        assert sysfs.read_str(str(tmp_path / "status")) == "Charging"
        assert sysfs.read_float(str(tmp_path / "scale")) == pytest.approx(0.000598)
        assert sysfs.read_bool(str(tmp_path / "present")) is True
        assert sysfs.read_int_list(str(tmp_path / "freqs")) == [200000000, 300000000, 400000000]

    def test_missing_files(self, tmp_path):
        missing = str(tmp_path / "nope")

        assert sysfs.read_str(missing) is None
        assert sysfs.read_int(missing) is None
        assert sysfs.read_float(missing) is None
        assert sysfs.read_bool(missing) is None
        assert sysfs.read_int_list(missing) == []
        assert sysfs.list_dir(missing) == []

    def test_unparseable_int(self, tmp_path):
        write_tree(tmp_path, {"value": "n/a\n"})
        assert sysfs.read_int(str(tmp_path / "value")) is None

    def test_list_dir_sorted(self, tmp_path):
        write_tree(tmp_path, {"b": "", "a": "", "c": ""})
        assert sysfs.list_dir(str(tmp_path)) == ["a", "b", "c"]

    def test_parse_cpu_list(self):
        assert sysfs.parse_cpu_list("0-3,5") == [0, 1, 2, 3, 5]
        assert sysfs.parse_cpu_list("4-5") == [4, 5]
        assert sysfs.parse_cpu_list("") == []
        assert sysfs.parse_cpu_list(None) == []

    def test_unit_conversions(self):
        assert sysfs.uv_to_v(3_850_000) == pytest.approx(3.85)
        assert sysfs.ua_to_a(-450_000) == pytest.approx(-0.45)
        assert sysfs.mc_to_c(41_250) == pytest.approx(41.25)
        assert sysfs.khz_to_mhz(1_416_000) == pytest.approx(1416.0)
        assert sysfs.hz_to_mhz(800_000_000) == pytest.approx(800.0)


class TestPowerProbe:
    """Test battery and USB readings."""

    def test_battery_values(self, tmp_path, monkeypatch):
        write_tree(tmp_path, {
            "battery/capacity": "80\n",
            "battery/status": "Discharging\n",
            "battery/voltage_now": "3850000\n",
            "battery/current_now": "-450000\n",
            "battery/temp": "285\n",
            "battery/present": "1\n",
            "pd/usb_type": "C [PD] PD_PPS\n",
        })
        monkeypatch.setattr(power, "BATTERY", str(tmp_path / "battery"))
        monkeypatch.setattr(power, "USB_INPUT", str(tmp_path / "usb"))
        monkeypatch.setattr(power, "USB_C_PD", str(tmp_path / "pd"))
        monkeypatch.setattr(power, "TYPE_C_PORT", str(tmp_path / "port0"))

        fragment = power.collect_power()

        battery = fragment["battery"]
        assert battery["capacity"] == 80
        assert battery["status"] == "Discharging"
        assert battery["voltage"] == pytest.approx(3.85)
        assert battery["current"] == pytest.approx(-0.45)
        assert battery["temperature"] == pytest.approx(28.5)
        assert battery["present"] is True
        assert fragment["usb_c_pd"]["usb_type"] == "PD"
        assert fragment["usb_input"] == power.default_power()["usb_input"]

    def test_absent_hardware_matches_default(self, tmp_path, monkeypatch):
        for name in ("BATTERY", "USB_INPUT", "USB_C_PD", "TYPE_C_PORT"):
            monkeypatch.setattr(power, name, str(tmp_path / name.lower()))

        assert power.collect_power() == power.default_power()


class TestThermalProbe:
    """Test thermal zone mapping."""

    def test_zones_and_cooling(self, tmp_path, monkeypatch):
        write_tree(tmp_path, {
            "thermal_zone0/temp": "30000\n",
            "thermal_zone0/type": "battery\n",
            "thermal_zone1/temp": "45500\n",
            "thermal_zone1/type": "cpu-thermal\n",
            "cooling_device1/type": "thermal-cpufreq-1\n",
            "cooling_device1/cur_state": "2\n",
            "cooling_device1/max_state": "5\n",
            "cooling_device0/type": "thermal-cpufreq-0\n",
        })
        monkeypatch.setattr(thermal, "THERMAL", str(tmp_path))

        fragment = thermal.collect_thermal()

        assert fragment["battery_temp"] == pytest.approx(30.0)
        assert fragment["cpu_temp"] == pytest.approx(45.5)
        assert fragment["gpu_temp"] == 0.0
        assert [z["type"] for z in fragment["zones"]] == ["battery", "cpu-thermal"]
        assert [c["index"] for c in fragment["cooling_devices"]] == [0, 1]
        assert fragment["cooling_devices"][1]["current_state"] == 2


class TestGpuProbe:
    def test_devfreq(self, tmp_path, monkeypatch):
        write_tree(tmp_path, {
            "cur_freq": "400000000\n",
            "max_freq": "800000000\n",
            "governor": "simple_ondemand\n",
            "available_frequencies": "200000000 400000000 800000000\n",
        })
        monkeypatch.setattr(gpu, "DEVFREQ", str(tmp_path))

        frequency = gpu.collect_gpu()["frequency"]

        assert frequency["current_freq"] == pytest.approx(400.0)
        assert frequency["governor"] == "simple_ondemand"
        assert frequency["available_frequencies"] == [200.0, 400.0, 800.0]


class TestSystemProbe:
    def test_leds_and_rfkill(self, tmp_path, monkeypatch):
        write_tree(tmp_path, {
            "backlight/brightness": "500\n",
            "backlight/max_brightness": "1000\n",
            "backlight/bl_power": "0\n",
            "leds/red:indicator/brightness": "1\n",
            "leds/red:indicator/trigger": "none [default-on] timer\n",
            "rfkill/rfkill0/type": "wlan\n",
            "rfkill/rfkill0/soft": "1\n",
            "rfkill/rfkill0/hard": "0\n",
            "wakeup_count": "17\n",
        })
        monkeypatch.setattr(system, "BACKLIGHT", str(tmp_path / "backlight"))
        monkeypatch.setattr(system, "LEDS", str(tmp_path / "leds"))
        monkeypatch.setattr(system, "RFKILL", str(tmp_path / "rfkill"))
        monkeypatch.setattr(system, "WAKEUP_COUNT", str(tmp_path / "wakeup_count"))

        fragment = system.collect_system()

        assert fragment["display"]["brightness_percent"] == pytest.approx(50.0)
        assert fragment["display"]["power"] is True
        assert fragment["leds"][0]["trigger"] == "default-on"
        assert fragment["rfkill"] == [
            {"type": "wifi", "name": "rfkill0", "soft_blocked": True, "hard_blocked": False}
        ]
        assert fragment["wakeup_count"] == 17


class TestClassifiers:
    def test_interface_type(self):
        assert interface_type("lo") == "loopback"
        assert interface_type("wlan0") == "wifi"
        assert interface_type("wwan0") == "cellular"
        assert interface_type("usb0") == "usb"
        assert interface_type("eth0") == "other"

    def test_device_type(self):
        assert device_type("mmcblk2") == "emmc"
        assert device_type("mmcblk1") == "sdcard"
        assert device_type("zram0") == "zram"


class TestRegistry:
    """Test tier to probe mapping."""

    def test_slots_per_tier(self):
        table = build_probes(AgentSettings())

        assert [p.name for p in table[Tier.HIGH]] == ["power", "thermal", "cpu", "memory", "network"]
        assert [p.name for p in table[Tier.MEDIUM]] == ["cpu_stats", "gpu", "storage", "processes"]
        assert [p.name for p in table[Tier.LOW]] == ["sensors", "system"]

    def test_collector_flags(self):
        settings = AgentSettings(collect_battery=False, collect_cpu=False, collect_sensors=False)
        table = build_probes(settings)
        enabled = {p.name: p.enabled for probes in table.values() for p in probes}

        assert enabled["power"] is False
        assert enabled["cpu"] is False
        assert enabled["cpu_stats"] is False
        assert enabled["sensors"] is False
        assert enabled["system"] is True
        assert enabled["gpu"] is True

    @pytest.mark.asyncio
    async def test_collect_shape_matches_default(self):
        """Every probe's live fragment has the same top-level keys as its default."""
        table = build_probes(AgentSettings(max_processes=5))

        for probes in table.values():
            for probe in probes:
                fragment = await probe.collect()
                assert set(fragment) == set(probe.default()), probe.name

    @pytest.mark.asyncio
    async def test_process_limit(self):
        table = build_probes(AgentSettings(max_processes=3))
        processes = next(p for p in table[Tier.MEDIUM] if p.name == "processes")

        fragment = await processes.collect()

        assert len(fragment["processes"]) <= 3
        assert fragment["summary"]["total"] >= len(fragment["processes"])
