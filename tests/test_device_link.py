import asyncio

import pytest
import tinytuya

from tuyarelay.core import (Backoff, DeviceLink, LINK_CONNECTED, LINK_DISCOVERING, LINK_STOPPED,
                            LINK_UNINITIALIZED)
from conftest import fake_device_factory, make_config

# DeviceLink tests replace tinytuya.Device with FakeTuyaDevice, no network I/O


def make_link(status_response=None, reports=(), device=None, **kwargs):
    config = make_config()
    descriptor = config.device if device is None else device
    factory = fake_device_factory(status_response, reports)
    kwargs.setdefault('keepalive', 1000)
    link = DeviceLink(descriptor, device_factory=factory, reconnect_delay=0.01, reconnect_max_delay=0.04, **kwargs)
    return link, factory


def test_backoff_doubles_and_caps():
    backoff = Backoff(5, 30)
    assert [backoff.next() for _ in range(5)] == [5, 10, 20, 30, 30]
    backoff.reset()
    assert backoff.next() == 5


def test_repr_and_initial_state():
    link, _ = make_link()
    assert link.state == LINK_UNINITIALIZED
    assert 'd7ff5628727aa0a67197f9' in repr(link)


@pytest.mark.asyncio
async def test_find_skips_scan_when_address_known(monkeypatch):
    def no_scan(*args, **kwargs):
        raise AssertionError('scan should not run')
    monkeypatch.setattr(tinytuya, 'find_device', no_scan)

    link, _ = make_link()
    assert await link.find() is True
    assert link.address == '10.0.0.53'


@pytest.mark.asyncio
async def test_find_uses_broadcast_discovery(monkeypatch):
    calls = []
    def find_device(dev_id=None, address=None):
        calls.append((dev_id, address))
        return {'ip': '10.0.0.77', 'version': '3.4', 'id': dev_id, 'product_id': '', 'data': {}}
    monkeypatch.setattr(tinytuya, 'find_device', find_device)

    config = make_config()
    link, _ = make_link(device=config.device._replace(address=None, version=None))
    assert await link.find() is True
    assert calls == [('d7ff5628727aa0a67197f9', None)]
    assert link.address == '10.0.0.77'
    assert link.version == 3.4


@pytest.mark.asyncio
async def test_find_not_found(monkeypatch):
    monkeypatch.setattr(tinytuya, 'find_device',
                        lambda dev_id=None, address=None: {'ip': None, 'version': None, 'id': None, 'product_id': None, 'data': {}})

    config = make_config()
    link, factory = make_link(device=config.device._replace(address=None))
    assert await link.discover_and_connect() is False
    assert link.state == LINK_DISCOVERING
    assert factory.created == []


@pytest.mark.asyncio
async def test_connect_refreshes_and_notifies():
    link, factory = make_link({'devId': 'd7ff', 'dps': {'1': True, '2': 'white'}})
    connected, reports = [], []
    link.register_connect_handler(lambda l: connected.append(l))

    async def on_data(l, payload):
        reports.append(payload)
    link.register_data_handler(on_data)

    assert await link.discover_and_connect() is True
    assert link.state == LINK_CONNECTED
    assert connected == [link]
    assert reports == [{'devId': 'd7ff', 'dps': {'1': True, '2': 'white'}}]

    dev = factory.created[0]
    assert dev.address == '10.0.0.53'
    assert dev.kwargs['persist'] is True
    assert dev.kwargs['version'] == 3.3


@pytest.mark.asyncio
async def test_connect_failure_closes_device():
    link, factory = make_link({"Error": "Network Error: Unable to Connect", "Err": "901", "Payload": None})
    assert await link.discover_and_connect() is False
    assert link.state == LINK_DISCOVERING
    assert factory.created[0].closed is True
    assert link.device is None


@pytest.mark.asyncio
async def test_handler_errors_do_not_break_link():
    link, _ = make_link({'dps': {'1': True}})

    def broken(l, payload):
        raise ValueError('boom')
    link.register_data_handler(broken)
    assert await link.connect() is True


@pytest.mark.asyncio
async def test_monitor_dispatches_reports_until_connection_lost():
    reports = [None, {'dps': {'1': False}}, {'data': {'dps': {'1': True}}}, {'t': 12345}]
    link, factory = make_link({'dps': {'1': True}}, reports)
    seen = []
    link.register_data_handler(lambda l, payload: seen.append(payload['dps']))

    assert await link.connect() is True
    await link.monitor()

    # None and payloads without DPS are not dispatched
    assert seen == [{'1': True}, {'1': False}, {'1': True}]
    assert link.state == LINK_DISCOVERING
    assert factory.created[0].closed is True


@pytest.mark.asyncio
async def test_monitor_sends_heartbeats():
    link, factory = make_link({'dps': {'1': True}}, [None, None], keepalive=0)
    assert await link.connect() is True
    dev = factory.created[0]
    await link.monitor()
    assert dev.heartbeats >= 1


@pytest.mark.asyncio
async def test_run_retries_with_backoff_and_stops():
    link, factory = make_link({"Error": "Network Error: Unable to Connect", "Err": "901", "Payload": None})
    task = link.start()
    assert link.start() is task
    await asyncio.sleep(0.15)
    assert len(factory.created) >= 3

    await link.stop()
    assert link.state == LINK_STOPPED
    assert task.done()


@pytest.mark.asyncio
async def test_run_reconnects_after_loss():
    link, factory = make_link({'dps': {'1': True}}, [{'dps': {'1': False}}])
    seen = []
    link.register_data_handler(lambda l, payload: seen.append(payload['dps']['1']))

    link.start()
    await asyncio.sleep(0.1)
    await link.stop()

    # every session: status refresh then one report
    assert len(factory.created) >= 2
    assert seen[:3] == [True, False, True]
