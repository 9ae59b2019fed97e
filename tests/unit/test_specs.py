"""Tests for host stats, FreeRDP discovery and the readiness check."""

from types import SimpleNamespace

import pytest

from enginescout_mcp.config import Settings
from enginescout_mcp.host import rdp, stats
from enginescout_mcp.host.rdp import find_freerdp, freerdp_major_version
from enginescout_mcp.host.specs import check_prerequisites, get_specs, satisfies_prerequisites
from enginescout_mcp.host.stats import HostStatsCollector
from enginescout_mcp.models.specs import HostSpecs

LSMOD_OUTPUT = """\
Module                  Size  Used by
iptable_nat            12288  1
ip_tables              32768  1 iptable_nat
kvm_intel             409600  0
"""

# 16303460 kB total, 8151730 kB available
TOTAL_BYTES = 16303460 * 1024
AVAILABLE_BYTES = 8151730 * 1024


def ready_specs(**overrides) -> HostSpecs:
    values = dict(
        cpu_cores=2,
        ram_gb=4,
        kvm_enabled=True,
        docker_installed=True,
        docker_compose_installed=True,
        docker_is_running=True,
        docker_is_in_user_groups=True,
        freerdp3_installed=True,
        ip_tables_loaded=True,
        iptable_nat_loaded=True,
    )
    values.update(overrides)
    return HostSpecs(**values)


@pytest.fixture
def host_psutil(monkeypatch):
    """Two physical cores and ~15.5 GB of memory."""
    monkeypatch.setattr(stats.psutil, "cpu_count", lambda logical=True: 2 if not logical else 4)
    monkeypatch.setattr(
        stats.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(total=TOTAL_BYTES, available=AVAILABLE_BYTES),
    )


@pytest.fixture
def broken_psutil(monkeypatch):
    """psutil cannot determine cores or read memory."""

    def fail():
        raise OSError("/proc/meminfo unreadable")

    monkeypatch.setattr(stats.psutil, "cpu_count", lambda logical=True: None)
    monkeypatch.setattr(stats.psutil, "virtual_memory", fail)


@pytest.fixture
def collector(runner, tmp_path, host_psutil):
    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("flags\t\t: fpu vme de pse vmx ssse3\n")
    kvm = tmp_path / "kvm"
    kvm.touch()
    return HostStatsCollector(runner=runner, cpuinfo_path=cpuinfo, kvm_device=kvm)


class TestPrerequisites:
    """Tests for the readiness predicate."""

    def test_group_gate_applies_when_required(self):
        specs = ready_specs(docker_is_in_user_groups=False)
        assert not satisfies_prerequisites(specs, requires_group=True)
        specs.docker_is_in_user_groups = True
        assert satisfies_prerequisites(specs, requires_group=True)

    def test_group_gate_skipped_when_not_required(self):
        specs = ready_specs(docker_is_in_user_groups=False)
        assert satisfies_prerequisites(specs, requires_group=False)

    @pytest.mark.parametrize(
        "field",
        [
            "kvm_enabled",
            "docker_installed",
            "docker_compose_installed",
            "docker_is_running",
            "freerdp3_installed",
            "ip_tables_loaded",
            "iptable_nat_loaded",
        ],
    )
    def test_each_flag_is_required(self, field):
        assert not satisfies_prerequisites(ready_specs(**{field: False}), requires_group=False)

    def test_thresholds(self):
        assert not satisfies_prerequisites(ready_specs(ram_gb=3.99), requires_group=False)
        assert not satisfies_prerequisites(ready_specs(cpu_cores=1), requires_group=False)

    def test_custom_thresholds(self):
        settings = Settings(min_ram_gb=8, min_cpu_cores=4)
        assert not satisfies_prerequisites(ready_specs(), False, settings)
        assert satisfies_prerequisites(ready_specs(ram_gb=8, cpu_cores=4), False, settings)

    def test_defaults_fail(self):
        assert not satisfies_prerequisites(HostSpecs(), requires_group=False)


class TestHostStats:
    """Tests for the host stats collector."""

    def test_cpu_cores_counts_physical(self, collector):
        assert collector.cpu_cores() == 2

    def test_cpu_cores_unknown(self, broken_psutil):
        assert HostStatsCollector().cpu_cores() == 0

    def test_memory_info(self, collector):
        info = collector.memory_info()
        assert info.total_gb == 15.55
        assert info.available_gb == 7.77

    def test_memory_info_raises(self, broken_psutil):
        with pytest.raises(OSError):
            HostStatsCollector().memory_info()

    def test_kvm_enabled(self, collector):
        assert collector.kvm_enabled()

    def test_kvm_without_device(self, collector, tmp_path):
        collector.kvm_device = tmp_path / "no-kvm"
        assert not collector.kvm_enabled()

    def test_kvm_without_extension(self, collector):
        collector.cpuinfo_path.write_text("flags\t\t: fpu vme de pse\n")
        assert not collector.kvm_enabled()

    @pytest.mark.asyncio
    async def test_module_loaded(self, collector, runner):
        runner.add(["lsmod"], LSMOD_OUTPUT)
        assert await collector.module_loaded("ip_tables")
        assert await collector.module_loaded("iptable_nat")
        assert not await collector.module_loaded("iptable")

    @pytest.mark.asyncio
    async def test_module_lsmod_failure(self, collector):
        assert not await collector.module_loaded("ip_tables")


class TestFreeRDP:
    """Tests for FreeRDP discovery."""

    def test_major_version(self):
        assert freerdp_major_version("This is FreeRDP version 3.5.1 (n/a)") == 3
        assert freerdp_major_version("This is FreeRDP version 2.11.2 (2.11.2)") == 2
        assert freerdp_major_version("command not found") is None

    @pytest.mark.asyncio
    async def test_native_client(self, runner, monkeypatch):
        paths = {"xfreerdp": "/usr/bin/xfreerdp", "xfreerdp3": None}
        monkeypatch.setattr(rdp.shutil, "which", lambda name: paths.get(name))
        runner.add(["/usr/bin/xfreerdp", "--version"], "This is FreeRDP version 3.5.1 (n/a)\n")
        assert await find_freerdp(runner) == ["/usr/bin/xfreerdp"]

    @pytest.mark.asyncio
    async def test_skips_freerdp2(self, runner, monkeypatch):
        paths = {"xfreerdp": "/usr/bin/xfreerdp"}
        monkeypatch.setattr(rdp.shutil, "which", lambda name: paths.get(name))
        runner.add(["/usr/bin/xfreerdp", "--version"], "This is FreeRDP version 2.11.2\n")
        assert await find_freerdp(runner) is None

    @pytest.mark.asyncio
    async def test_flatpak_client(self, runner, monkeypatch):
        paths = {"flatpak": "/usr/bin/flatpak"}
        monkeypatch.setattr(rdp.shutil, "which", lambda name: paths.get(name))
        runner.add(
            ["flatpak", "list", "--app", "--columns=application"],
            "org.mozilla.firefox\ncom.freerdp.FreeRDP\n",
        )
        assert await find_freerdp(runner) == [
            "flatpak",
            "run",
            "--command=xfreerdp",
            "com.freerdp.FreeRDP",
        ]


class TestGetSpecs:
    """Tests for fault-isolated spec gathering."""

    @pytest.mark.asyncio
    async def test_ready_docker_host(self, engine, docker_runner, collector):
        docker_runner.add(["lsmod"], LSMOD_OUTPUT)
        docker_runner.add(["docker", "ps"], "CONTAINER ID   IMAGE\n")
        docker_runner.add(["id", "-Gn"], "alice docker\n")

        async def locator():
            return ["/usr/bin/xfreerdp3"]

        specs, satisfied = await check_prerequisites(engine, collector=collector, rdp_locator=locator)
        assert specs == ready_specs(ram_gb=15.55)
        assert satisfied

    @pytest.mark.asyncio
    async def test_docker_user_outside_group(self, engine, docker_runner, collector):
        docker_runner.add(["lsmod"], LSMOD_OUTPUT)
        docker_runner.add(["docker", "ps"], "CONTAINER ID   IMAGE\n")
        docker_runner.add(["id", "-Gn"], "alice\n")

        async def locator():
            return ["/usr/bin/xfreerdp3"]

        specs, satisfied = await check_prerequisites(engine, collector=collector, rdp_locator=locator)
        assert not specs.docker_is_in_user_groups
        assert not satisfied

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, engine, podman_runner, tmp_path, broken_psutil):
        podman_runner.add(["podman", "ps"], "CONTAINER ID   IMAGE\n")
        collector = HostStatsCollector(
            runner=podman_runner,
            cpuinfo_path=tmp_path / "missing",
            kvm_device=tmp_path / "missing",
        )

        async def locator():
            raise RuntimeError("flatpak exploded")

        specs = await get_specs(engine, collector=collector, rdp_locator=locator)
        assert specs.ram_gb == 0
        assert specs.cpu_cores == 0
        assert not specs.kvm_enabled
        assert not specs.freerdp3_installed
        assert specs.docker_installed
        assert specs.docker_compose_installed
        assert specs.docker_is_running
        assert specs.docker_is_in_user_groups

    @pytest.mark.asyncio
    async def test_no_engine(self, engine, runner, collector):
        async def locator():
            return None

        specs = await get_specs(engine, collector=collector, rdp_locator=locator)
        assert not specs.docker_installed
        assert not specs.docker_compose_installed
        assert not specs.docker_is_running
        assert not specs.docker_is_in_user_groups
        assert specs.kvm_enabled
