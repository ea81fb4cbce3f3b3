# TuyaRelay Bridge
# -*- coding: utf-8 -*-
"""
 Bootstrap helpers for running the bridge as a HomeKit accessory server

    driver = create_driver(config)    # AccessoryDriver with the accessory added
    run(config)                       # create_driver() and start it (blocks until SIGTERM/SIGINT)
"""

import logging
import signal

from pyhap.accessory_driver import AccessoryDriver

from .LightAccessory import TuyaLightAccessory

log = logging.getLogger(__name__)


def create_driver(config, driver_factory=AccessoryDriver):
    kwargs = {'port': config.hap_port, 'persist_file': config.persist_file}
    if config.pincode:
        kwargs['pincode'] = config.pincode
    driver = driver_factory(**kwargs)
    accessory = TuyaLightAccessory(driver, config)
    driver.add_accessory(accessory=accessory)
    signal.signal(signal.SIGTERM, driver.signal_handler)
    log.debug('HomeKit driver on port %d, state in %s', config.hap_port, config.persist_file)
    return driver


def run(config):
    driver = create_driver(config)
    log.info('Starting TuyaRelay bridge for device %s', config.device.id)
    driver.start()
