# TuyaRelay Light Accessory
# -*- coding: utf-8 -*-
"""
 TuyaRelay - HomeKit Lightbulb accessory backed by a Tuya bulb

 The accessory owns the bridge: it builds the state mirror, relay client,
 device link and bridge adapter (in that order), attaches the adapter to the
 "On" characteristic and starts device discovery when the driver runs it.
"""

import logging

from pyhap.accessory import Accessory
from pyhap.const import CATEGORY_LIGHTBULB

from .core import BridgeAdapter, DeviceLink, RelayClient, StateMirror

log = logging.getLogger(__name__)


class TuyaLightAccessory(Accessory):
    """Lightbulb whose On state mirrors a Tuya bulb and is relayed to a TCP peer"""

    category = CATEGORY_LIGHTBULB

    def __init__(self, driver, config, link=None, aid=None):
        super().__init__(driver, config.accessory.name, aid=aid)
        self.config = config

        self.set_info_service(
            manufacturer=config.accessory.manufacturer,
            model=config.accessory.model,
            serial_number=config.accessory.serial,
        )
        serv_light = self.add_preload_service('Lightbulb')
        self.char_on = serv_light.configure_char('On')

        self.mirror = StateMirror()
        self.relay = RelayClient(config.relay, loop=getattr(driver, 'loop', None))
        if link is None:
            link = DeviceLink(
                config.device,
                keepalive=config.keepalive,
                reconnect_delay=config.reconnect_delay,
                reconnect_max_delay=config.reconnect_max_delay,
            )
        self.link = link
        self.adapter = BridgeAdapter(self.mirror, self.relay, self.link,
                                     relay_device_reports=config.relay_device_reports)
        self.adapter.attach(self.char_on)
        log.info('Accessory %r created', self.display_name)

    async def run(self):
        """Called by the driver when it starts: begin discovery"""
        log.debug('Starting device link %r', self.link)
        self.link.start()

    async def stop(self):
        await self.link.stop()
        await self.relay.drain()
        log.info('Accessory %r stopped', self.display_name)
