# TuyaRelay Module
# -*- coding: utf-8 -*-
"""
 Configuration loading for the relay bridge

 The bridge reads a JSON file (default tuyarelay.json):

    {
        "device": {"id": "...", "key": "...", "ip": "192.168.1.53", "version": "3.3"},
        "relay": {"host": "192.168.1.211", "port": 8980, "timeout": 5},
        "accessory": {"name": "Tuya Light", "manufacturer": "...", "model": "...", "serial": "..."},
        "hap": {"port": 51826, "persist_file": "tuyarelay.state", "pincode": null},
        "relay_device_reports": true,
        "reconnect": {"delay": 5, "max_delay": 300},
        "keepalive": 12
    }

 Environment overrides: TUYARELAY_HOST, TUYARELAY_PORT
"""

from collections import namedtuple
import json
import logging
import os

from .const import (AUTO_ADDRESSES, CONFIGFILE, HAPPORT, KEEPALIVE_TIMER, PERSISTFILE, RECONNECT_DELAY,
                    RECONNECT_MAX_DELAY, RELAYPORT, RELAYTIMEOUT, TCPPORT)
from .exceptions import ConfigError

log = logging.getLogger(__name__)

DeviceDescriptor = namedtuple('DeviceDescriptor', 'id key address version port')
RelayTarget = namedtuple('RelayTarget', 'host port timeout')
AccessoryInfo = namedtuple('AccessoryInfo', 'name manufacturer model serial')
BridgeConfig = namedtuple(
    'BridgeConfig',
    'device relay accessory hap_port persist_file pincode relay_device_reports reconnect_delay reconnect_max_delay keepalive'
)

DEFAULT_ACCESSORY = {
    'name': 'Tuya Light',
    'manufacturer': 'Default-Manufacturer',
    'model': 'Default-Model',
    'serial': 'Default-Serial',
}


def _section(config, name):
    section = config.get(name, {})
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigError(name, 'must be an object')
    return section


def _port(value, field):
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(field, 'port must be an integer, got %r' % (value,))
    if not 0 < port < 65536:
        raise ConfigError(field, 'port out of range: %d' % port)
    return port


def _positive(value, field):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(field, 'must be a number, got %r' % (value,))
    if number <= 0:
        raise ConfigError(field, 'must be greater than zero')
    return number


def device_from_dict(device):
    dev_id = device.get('id')
    if not dev_id:
        raise ConfigError('device.id', 'a device id is required')

    address = device.get('ip', device.get('address'))
    if address in AUTO_ADDRESSES:
        address = None

    version = device.get('version')
    if version in (None, ''):
        version = None
    else:
        try:
            version = float(version)
        except (TypeError, ValueError):
            raise ConfigError('device.version', 'unknown protocol version %r' % (version,))

    key = device.get('key') or ''
    if not isinstance(key, str):
        raise ConfigError('device.key', 'must be a string')
    # 3.1 devices only encrypt some commands, everything newer needs the full key
    if (version is None or version > 3.1) and len(key) != 16:
        raise ConfigError('device.key', 'local key must be 16 characters (got %d)' % len(key))

    return DeviceDescriptor(str(dev_id), key, address, version, _port(device.get('port', TCPPORT), 'device.port'))


def relay_from_dict(relay):
    host = relay.get('host')
    if not host:
        raise ConfigError('relay.host', 'a relay host is required')
    try:
        str(host).encode('idna')
    except UnicodeError:
        raise ConfigError('relay.host', 'not a valid host name: %r' % (host,))
    return RelayTarget(str(host), _port(relay.get('port', RELAYPORT), 'relay.port'),
                       _positive(relay.get('timeout', RELAYTIMEOUT), 'relay.timeout'))


def config_from_dict(config, environ=None):
    """
    Build a validated BridgeConfig from a parsed JSON object

    Raises ConfigError naming the offending field.
    """
    if not isinstance(config, dict):
        raise ConfigError('config', 'must be a JSON object')
    if environ is None:
        environ = os.environ

    relay = dict(_section(config, 'relay'))
    if environ.get('TUYARELAY_HOST'):
        relay['host'] = environ['TUYARELAY_HOST']
    if environ.get('TUYARELAY_PORT'):
        relay['port'] = environ['TUYARELAY_PORT']

    accessory = dict(DEFAULT_ACCESSORY)
    accessory.update(_section(config, 'accessory'))

    hap = _section(config, 'hap')
    pincode = hap.get('pincode')
    if pincode is not None:
        pincode = str(pincode).encode('ascii')

    reconnect = _section(config, 'reconnect')
    delay = _positive(reconnect.get('delay', RECONNECT_DELAY), 'reconnect.delay')
    max_delay = _positive(reconnect.get('max_delay', RECONNECT_MAX_DELAY), 'reconnect.max_delay')
    if max_delay < delay:
        raise ConfigError('reconnect.max_delay', 'must not be smaller than reconnect.delay')

    relay_device_reports = config.get('relay_device_reports', True)
    if not isinstance(relay_device_reports, bool):
        raise ConfigError('relay_device_reports', 'must be true or false, got %r' % (relay_device_reports,))

    return BridgeConfig(
        device=device_from_dict(_section(config, 'device')),
        relay=relay_from_dict(relay),
        accessory=AccessoryInfo(**{k: str(accessory[k]) for k in AccessoryInfo._fields}),
        hap_port=_port(hap.get('port', HAPPORT), 'hap.port'),
        persist_file=hap.get('persist_file') or PERSISTFILE,
        pincode=pincode,
        relay_device_reports=relay_device_reports,
        reconnect_delay=delay,
        reconnect_max_delay=max_delay,
        keepalive=_positive(config.get('keepalive', KEEPALIVE_TIMER), 'keepalive'),
    )


def load_config(filename=CONFIGFILE, environ=None):
    """Read, validate and return the BridgeConfig stored in `filename`"""
    try:
        with open(filename) as f:
            config = json.load(f)
    except FileNotFoundError:
        raise ConfigError(filename, 'configuration file not found')
    except ValueError as e:
        raise ConfigError(filename, 'invalid JSON: %s' % e)
    log.debug('loaded=%s', filename)
    return config_from_dict(config, environ)
