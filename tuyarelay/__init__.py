# TuyaRelay Module
# -*- coding: utf-8 -*-
"""
 Python module to bridge a Tuya WiFi smart bulb to HomeKit and relay its
 power state to a local TCP peer

 For more information see README.md

 Classes
    TuyaLightAccessory(driver, config, link=None)
        HomeKit Lightbulb (HAP-python Accessory) that owns the bridge below.

    DeviceLink(descriptor, connection_timeout=5, keepalive=12, reconnect_delay=5, reconnect_max_delay=300)
        Persistent tinytuya session to the bulb with discovery and reconnect.

    RelayClient(target, loop=None)
        Sends "on" / "off" to the relay peer, one TCP connection per change.

    StateMirror(value=False)
        Last known power state.

    BridgeAdapter(mirror, relay, link=None, relay_device_reports=True)
        HomeKit get/set handlers and device report handling.

 Functions
    config = load_config(filename)     # read and validate tuyarelay.json
    driver = create_driver(config)     # HAP-python AccessoryDriver with the accessory added
    run(config)                        # create_driver() and start it
    set_debug(toggle, color)           # Activate verbose debugging output

 Credits
  * TinyTuya https://github.com/jasonacox/tinytuya by jasonacox
    For the Tuya LAN protocol
  * HAP-python https://github.com/ikalchev/HAP-python by ikalchev
    For the HomeKit Accessory Protocol

"""

from .core import *
from .core import __version__
from .core import __author__

from .LightAccessory import TuyaLightAccessory
from .bridge import create_driver, run
