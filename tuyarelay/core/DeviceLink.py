# TuyaRelay Module
# -*- coding: utf-8 -*-
"""
 Device Link - keeps a persistent tinytuya session to the bulb

 tinytuya does the Tuya LAN protocol (discovery, session keys, encryption);
 its blocking calls are run in worker threads so the event loop driving
 HomeKit is never blocked.

 Classes
    DeviceLink(descriptor, connection_timeout=5, keepalive=12, reconnect_delay=5, reconnect_max_delay=300)
        descriptor (DeviceDescriptor): id, key, address, version and port of the bulb
    Backoff(initial, maximum, factor=2)

 Functions
    ok = await find()                  # resolve IP address / version via UDP broadcast if needed
    ok = await connect()               # open the session and request a status refresh
    ok = await discover_and_connect()  # find() then connect()
    task = start()                     # run() in the background: connect, monitor, reconnect
    await stop()                       # cancel the monitor and close the socket
    register_connect_handler(cb)       # cb(link)
    register_data_handler(cb)          # cb(link, payload) for every report carrying DPS
"""

import asyncio
import inspect
import logging
import time

import tinytuya

from .const import (DEFAULT_VERSION, DEVICETIMEOUT, KEEPALIVE_TIMER, LINK_CONNECTED, LINK_DISCOVERING,
                    LINK_STOPPED, LINK_UNINITIALIZED, RECONNECT_DELAY, RECONNECT_MAX_DELAY)
from .core import dps_from_payload
from .error_helper import is_error

log = logging.getLogger(__name__)


class Backoff(object):
    """Exponential retry delay: initial, initial*factor, ... capped at maximum"""

    def __init__(self, initial=RECONNECT_DELAY, maximum=RECONNECT_MAX_DELAY, factor=2):
        self.initial = initial
        self.maximum = maximum
        self.factor = factor
        self.current = initial

    def next(self):
        delay = self.current
        self.current = min(self.current * self.factor, self.maximum)
        return delay

    def reset(self):
        self.current = self.initial


class DeviceLink(object):
    def __init__(
            self, descriptor, connection_timeout=DEVICETIMEOUT, keepalive=KEEPALIVE_TIMER,
            reconnect_delay=RECONNECT_DELAY, reconnect_max_delay=RECONNECT_MAX_DELAY,
            device_factory=None
    ):
        self.descriptor = descriptor
        self.address = descriptor.address
        self.version = descriptor.version
        self.connection_timeout = connection_timeout
        self.keepalive = keepalive
        self.backoff = Backoff(reconnect_delay, reconnect_max_delay)
        self.device_factory = device_factory if device_factory else tinytuya.Device
        self.device = None
        self.state = LINK_UNINITIALIZED
        self._task = None
        self._callbacks_connect = []
        self._callbacks_data = []

    def __repr__(self):
        return ("%s( %r, address=%r, version=%r, state=%r )" %
                (self.__class__.__name__, self.descriptor.id, self.address, self.version, self.state))

    @property
    def connected(self):
        return self.state == LINK_CONNECTED

    def register_connect_handler(self, cb):
        if cb not in self._callbacks_connect:
            self._callbacks_connect.append(cb)

    def register_data_handler(self, cb):
        if cb not in self._callbacks_data:
            self._callbacks_data.append(cb)

    async def _run_callbacks(self, callbacks, *args):
        for cb in callbacks:
            try:
                result = cb(self, *args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                log.exception('Handler %r failed', cb)

    async def find(self):
        """
        Resolve the device's address and protocol version

        Only scans the network when the address or version is unknown.
        Returns True if the device has an address afterwards.
        """
        if self.address and self.version:
            return True

        log.debug('Searching for device %s on the network', self.descriptor.id)
        bcast_data = await asyncio.to_thread(tinytuya.find_device, self.descriptor.id, self.address)
        if not bcast_data or bcast_data.get('ip') is None:
            log.warning('Unable to find device %s on network (specify IP address)', self.descriptor.id)
            return False

        self.address = bcast_data['ip']
        if bcast_data.get('version'):
            self.version = float(bcast_data['version'])
        log.info('Found device %s at %s (version %s)', self.descriptor.id, self.address, self.version)
        return True

    async def connect(self):
        """
        Open a persistent session and ask the device for a status refresh

        Returns True once connected. The status reply is dispatched to the data handlers.
        """
        self.device = self.device_factory(
            self.descriptor.id, self.address, self.descriptor.key,
            version=self.version or DEFAULT_VERSION, persist=True,
            connection_timeout=self.connection_timeout, port=self.descriptor.port
        )
        data = await asyncio.to_thread(self.device.status)
        if not data or is_error(data):
            log.warning('Connect to device %s at %s failed: %r', self.descriptor.id, self.address, data)
            await self._close_device()
            return False

        self.state = LINK_CONNECTED
        log.info('Connected to device!')
        await self._run_callbacks(self._callbacks_connect)
        await self._dispatch(data)
        return True

    async def discover_and_connect(self):
        self.state = LINK_DISCOVERING
        try:
            if not await self.find():
                return False
            return await self.connect()
        except asyncio.CancelledError:
            raise
        except Exception:
            log.exception('Discover/connect of device %s failed', self.descriptor.id)
            await self._close_device()
            return False

    async def _dispatch(self, data):
        dps = dps_from_payload(data)
        if dps is None:
            log.debug('ignoring payload without DPS: %r', data)
            return
        if 'dps' not in data:
            data = dict(data, dps=dps)
        log.debug('data:- %r', data)
        await self._run_callbacks(self._callbacks_data, data)

    def _poll(self, heartbeat):
        # runs in a worker thread
        if heartbeat:
            return self.device.heartbeat(nowait=False)
        return self.device.receive()

    async def monitor(self):
        """Listen for reports until the connection drops"""
        heartbeat_time = time.time() + self.keepalive
        while self.connected:
            heartbeat = time.time() >= heartbeat_time
            if heartbeat:
                heartbeat_time = time.time() + self.keepalive
            try:
                data = await asyncio.to_thread(self._poll, heartbeat)
            except (OSError, ValueError) as e:
                log.warning('Lost connection to device %s: %s', self.descriptor.id, e)
                break
            if is_error(data):
                log.warning('Lost connection to device %s: %r', self.descriptor.id, data)
                break
            if data:
                await self._dispatch(data)
        await self._close_device()
        if self.state != LINK_STOPPED:
            self.state = LINK_DISCOVERING

    async def run(self):
        """Connect, monitor, and reconnect with exponential backoff until stopped"""
        while self.state != LINK_STOPPED:
            if await self.discover_and_connect():
                self.backoff.reset()
                await self.monitor()
                if self.descriptor.address is None:
                    # re-discover, DHCP may have moved it
                    self.address = None
            if self.state == LINK_STOPPED:
                break
            delay = self.backoff.next()
            log.info('Reconnecting to device %s in %.0f seconds', self.descriptor.id, delay)
            await asyncio.sleep(delay)

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self.run())
        return self._task

    async def stop(self):
        self.state = LINK_STOPPED
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self._close_device()

    async def _close_device(self):
        if self.device is not None:
            device, self.device = self.device, None
            await asyncio.to_thread(device.close)
