# TuyaRelay Module
# -*- coding: utf-8 -*-
"""
 Bridge Adapter - routes the power flag between HomeKit, the bulb and the relay peer

 Functions
    attach(char)                        # install on_set/on_get as the characteristic's callbacks
    on_set(value)                       # HomeKit SET: update mirror, relay the new state
    on_get()                            # HomeKit GET: current mirror value
    on_device_state_reported(payload)   # device report: DPS 1 goes through the same path as on_set
"""

import logging

from .const import SOURCE_DEVICE, SOURCE_HOMEKIT
from .core import power_from_payload

log = logging.getLogger(__name__)


class BridgeAdapter(object):
    def __init__(self, mirror, relay, link=None, relay_device_reports=True):
        """
        Args:
            mirror (StateMirror): the shared power flag.
            relay (RelayClient): where state changes are announced.
            link (DeviceLink, optional): source of device reports.
            relay_device_reports (bool): also relay device-originated changes. Defaults to True.
        """
        self.mirror = mirror
        self.relay = relay
        self.link = link
        self.relay_device_reports = relay_device_reports
        self.char = None

        if link is not None:
            link.register_connect_handler(self._link_connected)
            link.register_data_handler(self._link_data)

    def attach(self, char):
        char.setter_callback = self._homekit_set
        char.getter_callback = self.on_get
        self.char = char

    def _homekit_set(self, value):
        # pyhap treats a setter's return value as a write response
        self.on_set(value)

    def on_set(self, value, source=SOURCE_HOMEKIT):
        """
        Handle "SET" requests, returns the spawned relay task

        Does not wait for the relay peer; a failed notification is logged by the relay client.
        """
        value = bool(value)
        log.info('set to on/off %r (%s)', value, source)
        self.mirror.set(value, source)
        return self.relay.notify_nowait(value)

    def on_get(self):
        is_on = self.mirror.get()
        log.debug('Get Characteristic On -> %r', is_on)
        return is_on

    def on_device_state_reported(self, payload):
        value = power_from_payload(payload)
        if value is None:
            log.debug('report without a power flag: %r', payload)
            return None

        log.info('Received power state %r from device', value)
        if self.char is not None:
            # set_value() notifies HomeKit without calling setter_callback
            self.char.set_value(value)
        if self.relay_device_reports:
            return self.on_set(value, SOURCE_DEVICE)
        self.mirror.set(value, SOURCE_DEVICE)
        return None

    def _link_connected(self, link):
        log.info('Device link %r is up', link)

    def _link_data(self, link, payload):
        self.on_device_state_reported(payload)
