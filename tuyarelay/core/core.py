# TuyaRelay Module
# -*- coding: utf-8 -*-
"""
 Python module to relay the power state of a Tuya smart bulb to HomeKit and
 to a local TCP peer

 For more information see README.md

 Core Helper Functions

 Module Functions
    set_debug(toggle, color)                    # Activate verbose debugging output
    termcolor(color)                            # Terminal colour escape sequences for CLI output
    power_from_payload(payload)                 # Extract the on/off flag (DPS 1) from a device report
    dps_from_payload(payload)                   # Extract the data-point mapping from a device report

"""

# Modules
import logging
import sys

try:
    from colorama import init
    HAVE_COLORAMA = True
except ImportError:
    HAVE_COLORAMA = False

HAVE_COLOR = HAVE_COLORAMA or not sys.platform.startswith('win')

from .const import DPS_POWER

# Colorama terminal color capability for all platforms
if HAVE_COLORAMA:
    init()

version_tuple = (1, 0, 0)  # Major, Minor, Patch
version = __version__ = "%d.%d.%d" % version_tuple
__author__ = "tuyarelay"

log = logging.getLogger(__name__)


def set_debug(toggle=True, color=True):
    """Enable tuyarelay verbose logging"""
    color = color and HAVE_COLOR
    root = logging.getLogger('tuyarelay')
    if toggle:
        if color:
            logging.basicConfig(
                format="\x1b[31;1m%(levelname)s:%(name)s:%(message)s\x1b[0m", level=logging.DEBUG
            )
        else:
            logging.basicConfig(format="%(levelname)s:%(name)s:%(message)s", level=logging.DEBUG)
        root.setLevel(logging.DEBUG)
        log.debug("TuyaRelay [%s]\n", __version__)
        log.debug("Python %s on %s", sys.version, sys.platform)
    else:
        root.setLevel(logging.NOTSET)


# Terminal color helper
def termcolor(color=True):
    color = color and HAVE_COLOR
    if color is False:
        # Disable Terminal Color Formatting
        bold = subbold = normal = dim = alert = alertdim = cyan = red = yellow = ""
    else:
        # Terminal Color Formatting
        bold = "\033[0m\033[97m\033[1m"
        subbold = "\033[0m\033[32m"
        normal = "\033[97m\033[0m"
        dim = "\033[0m\033[97m\033[2m"
        alert = "\033[0m\033[91m\033[1m"
        alertdim = "\033[0m\033[91m\033[2m"
        cyan = "\033[0m\033[36m"
        red = "\033[0m\033[31m"
        yellow = "\033[0m\033[33m"
    return bold,subbold,normal,dim,alert,alertdim,cyan,red,yellow


def dps_from_payload(payload):
    """Return the data-point dict of a device report, or None

    Protocol 3.4+ devices nest it as {"data":{"dps":{...}}}
    """
    if not isinstance(payload, dict):
        return None
    dps = payload.get('dps')
    if isinstance(dps, dict):
        return dps
    data = payload.get('data')
    if isinstance(data, dict) and isinstance(data.get('dps'), dict):
        return data['dps']
    return None


def power_from_payload(payload):
    """Return True/False from data-point 1 of a device report, or None if absent or not a bool"""
    dps = dps_from_payload(payload)
    if dps is None:
        return None
    value = dps.get(DPS_POWER)
    # bool only: 0/1 or "on" are not power flags
    if isinstance(value, bool):
        return value
    return None
