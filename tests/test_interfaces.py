import dataclasses

import pytest

from camnode.interfaces import (
    BootManager,
    CommBus,
    FileSystem,
    HttpClient,
    NetworkHal,
    PendingReply,
    PtzHal,
    Service,
    StorageHal,
    SystemClock,
    SystemControl,
    Timer,
    UdpSocket,
)
from camnode.types import HealthStatus, ServiceId, ServiceState, Topic


@pytest.mark.parametrize(
    "cls",
    [
        CommBus,
        Service,
        FileSystem,
        NetworkHal,
        StorageHal,
        SystemClock,
        UdpSocket,
        HttpClient,
        Timer,
        BootManager,
        SystemControl,
        PtzHal,
    ],
)
def test_abstract_contracts_cannot_be_instantiated(cls):
    with pytest.raises(TypeError):
        cls()


def test_partial_implementation_stays_abstract():
    class HalfTimer(Timer):
        def monotonic_ms(self):
            return 0

    with pytest.raises(TypeError):
        Timer()
    with pytest.raises(TypeError):
        HalfTimer()
    assert "sleep_ms" in Timer.__abstractmethods__
    assert "sleep_ms" in HalfTimer.__abstractmethods__


class _Dummy(Service):
    def service_id(self):
        return ServiceId.CLOUD

    def dependencies(self):
        return (ServiceId.NETWORK, ServiceId.STORAGE)

    def init(self, bus):
        self.bus = bus

    def start(self):
        pass

    def stop(self):
        pass

    def health(self):
        return HealthStatus(ServiceId.CLOUD, ServiceState.NORMAL)


def test_service_default_poll_does_no_work():
    svc = _Dummy()
    assert Service.poll(svc) is False


def test_pending_reply_fields():
    pending = PendingReply(request_id=7, topic=Topic.CMD_CONFIG, sent_at_ms=1000)
    assert pending.request_id == 7
    assert pending.topic is Topic.CMD_CONFIG
    assert pending.sent_at_ms == 1000


def test_pending_reply_is_immutable():
    pending = PendingReply(request_id=1, topic=Topic.CMD_LIVE, sent_at_ms=0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        pending.request_id = 2
    assert pending.request_id == 1


def test_pending_reply_equality():
    a = PendingReply(3, Topic.CMD_LIVE, 10)
    b = PendingReply(3, Topic.CMD_LIVE, 10)
    c = PendingReply(4, Topic.CMD_LIVE, 10)
    assert a == b
    assert a != c