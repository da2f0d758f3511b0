import pytest

from camnode.errors import CamError, ErrorCode
from camnode.rtos import (
    RtosBootManager,
    RtosFileSystem,
    RtosHttpClient,
    RtosNetworkHal,
    RtosPtzHal,
    RtosStorageHal,
    RtosSystemClock,
    RtosSystemControl,
    RtosTimer,
    RtosUdpSocket,
)

PASSWORD = "password"


def _assert_unsupported(info):
    assert info.value.code == ErrorCode.UNSUPPORTED


def test_filesystem_operations_unsupported():
    fs = RtosFileSystem()
    with pytest.raises(CamError) as info:
        fs.read_file("/a")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.write_file("/a", b"x")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.remove_file("/a")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.file_size("/a")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.list_dir("/")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.create_dir("/d")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.free_space("/")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        fs.total_space("/")
    _assert_unsupported(info)


def test_network_operations_unsupported():
    hal = RtosNetworkHal()
    with pytest.raises(CamError) as info:
        hal.connect("net", PASSWORD)
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.disconnect()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.scan_wifi()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.get_ip_address()
    _assert_unsupported(info)


def test_storage_operations_unsupported():
    hal = RtosStorageHal()
    with pytest.raises(CamError) as info:
        hal.mount()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.unmount()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.format()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.capacity_bytes()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        hal.used_bytes()
    _assert_unsupported(info)


def test_clock_set_time_unsupported():
    with pytest.raises(CamError) as info:
        RtosSystemClock().set_time_ms(1000)
    _assert_unsupported(info)


def test_udp_operations_unsupported():
    sock = RtosUdpSocket()
    with pytest.raises(CamError) as info:
        sock.send_to("localhost", 123, b"x")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        sock.recv_from(100)
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        sock.bind(123)
    _assert_unsupported(info)


def test_http_operations_unsupported():
    client = RtosHttpClient()
    with pytest.raises(CamError) as info:
        client.get("http://localhost/", [])
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        client.put("http://localhost/", [], b"x")
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        client.post("http://localhost/", [], b"x")
    _assert_unsupported(info)


def test_boot_operations_unsupported():
    boot = RtosBootManager()
    with pytest.raises(CamError) as info:
        boot.set_next_boot_slot(1)
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        boot.mark_boot_successful()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        boot.rollback()
    _assert_unsupported(info)


def test_system_control_operations_unsupported():
    control = RtosSystemControl()
    with pytest.raises(CamError) as info:
        control.reboot()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        control.factory_reset()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        control.get_device_info()
    _assert_unsupported(info)


def test_ptz_operations_unsupported():
    ptz = RtosPtzHal()
    with pytest.raises(CamError) as info:
        ptz.move_to(10, -10, 5)
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        ptz.zoom(2)
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        ptz.get_position()
    _assert_unsupported(info)
    with pytest.raises(CamError) as info:
        ptz.stop()
    _assert_unsupported(info)


def test_queries_return_neutral_values():
    assert RtosFileSystem().file_exists("/anything") is False
    assert RtosNetworkHal().is_connected() is False
    assert RtosNetworkHal().signal_strength() == 0
    assert RtosStorageHal().is_card_inserted() is False
    assert RtosSystemClock().now_ms() == 0
    assert RtosSystemClock().monotonic_ms() == 0
    assert RtosHttpClient().status_code() == 0
    assert RtosBootManager().current_slot() == 0


def test_timer_is_frozen():
    timer = RtosTimer()
    before = timer.monotonic_ms()
    timer.sleep_ms(50)
    assert timer.monotonic_ms() == before == 0