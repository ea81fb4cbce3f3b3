# Ensure local project root is on sys.path before any site-packages version
# so tests import the in-repo tuyarelay, not an installed one.
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    # Insert at position 0 for highest precedence
    sys.path.insert(0, ROOT)

import asyncio

import pytest
import pytest_asyncio

from tuyarelay.core import config_from_dict
from tuyarelay.listener import RelayListener

LOCAL_KEY = '0123456789abcdef'


def make_config(**overrides):
    config = {
        'device': {'id': 'd7ff5628727aa0a67197f9', 'key': LOCAL_KEY, 'ip': '10.0.0.53', 'version': '3.3'},
        'relay': {'host': '127.0.0.1', 'port': 8980, 'timeout': 2},
        'reconnect': {'delay': 0.01, 'max_delay': 0.05},
    }
    config.update(overrides)
    return config_from_dict(config, environ={})


class FakeTuyaDevice(object):
    """Stands in for tinytuya.Device: replays canned status/receive responses"""

    def __init__(self, dev_id, address, local_key, status_response=None, reports=(), **kwargs):
        self.id = dev_id
        self.address = address
        self.local_key = local_key
        self.kwargs = kwargs
        self.status_response = status_response
        self.reports = list(reports)
        self.closed = False
        self.heartbeats = 0

    def status(self):
        return self.status_response

    def receive(self):
        if self.reports:
            return self.reports.pop(0)
        return {"Error": "Network Error: Device Unreachable", "Err": "905", "Payload": None}

    def heartbeat(self, nowait=False):
        self.heartbeats += 1
        return self.receive()

    def close(self):
        self.closed = True


def fake_device_factory(status_response=None, reports=()):
    created = []

    def factory(dev_id, address, local_key, **kwargs):
        dev = FakeTuyaDevice(dev_id, address, local_key, status_response, reports, **kwargs)
        created.append(dev)
        return dev

    factory.created = created
    return factory


class MockDriver(object):
    """Just enough of pyhap's AccessoryDriver to build accessories"""

    def __init__(self):
        from pyhap.loader import get_loader
        self.loader = get_loader()
        self.loop = None
        self.published = []

    def publish(self, data, client_addr=None, immediate=False):
        self.published.append(data)


async def wait_for_tokens(listener, count, timeout=2.0):
    """Wait until the relay peer has seen `count` notifications"""
    deadline = asyncio.get_running_loop().time() + timeout
    while len(listener.received) < count:
        if asyncio.get_running_loop().time() > deadline:
            break
        await asyncio.sleep(0.01)
    return list(listener.received)


def closed_port():
    """A localhost port nothing is listening on"""
    import socket
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(('127.0.0.1', 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def mock_driver():
    return MockDriver()


@pytest_asyncio.fixture
async def relay_peer():
    listener = RelayListener('127.0.0.1', 0, callback=lambda token, peer: None)
    await listener.start()
    yield listener
    await listener.close()
