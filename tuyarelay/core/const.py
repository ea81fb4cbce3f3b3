# TuyaRelay Module
# -*- coding: utf-8 -*-

# Tuya Device Settings
TCPPORT = 6668          # Tuya TCP Local Port
DEVICETIMEOUT = 5       # Seconds to wait for the device socket
DEFAULT_VERSION = 3.3   # Protocol version used when discovery is skipped
DPS_POWER = '1'         # Data-point carrying the on/off flag
AUTO_ADDRESSES = (None, '', 'Auto', '0.0.0.0')

# Device Link Timers
KEEPALIVE_TIMER = 12    # Seconds between heartbeats on an idle link
RECONNECT_DELAY = 5     # First backoff delay after a failed connect
RECONNECT_MAX_DELAY = 300

# Relay Settings
RELAYPORT = 8980        # Relay peer TCP port
RELAYTIMEOUT = 5.0      # Seconds allowed for each connect/write/close step
TOKEN_ON = b'on'
TOKEN_OFF = b'off'

# HomeKit Settings
HAPPORT = 51826

# Link States
LINK_UNINITIALIZED = 'uninitialized'
LINK_DISCOVERING = 'discovering'
LINK_CONNECTED = 'connected'
LINK_STOPPED = 'stopped'

# Write Sources
SOURCE_HOMEKIT = 'homekit'
SOURCE_DEVICE = 'device'

# Configuration Files
CONFIGFILE = 'tuyarelay.json'
PERSISTFILE = 'tuyarelay.state'
