#!/usr/bin/env python
# -*- coding: utf-8 -*-
# PYTHON_ARGCOMPLETE_OK
# TuyaRelay Module
"""
 Python module to bridge a Tuya WiFi smart bulb to HomeKit and a local TCP peer

 Start the bridge:
    python -m tuyarelay run
 Send one relay notification by hand:
    python -m tuyarelay notify on
 Find the configured bulb on the network:
    python -m tuyarelay find
 Run a relay peer that prints what it receives:
    python -m tuyarelay listen

"""

# Modules
import asyncio
import logging
import os
import sys
import argparse
try:
    import argcomplete
    HAVE_ARGCOMPLETE = True
except ImportError:
    HAVE_ARGCOMPLETE = False

from . import CONFIGFILE, RELAYPORT, ConfigError, DeviceLink, RelayClient, RelayTarget, load_config, run, set_debug, termcolor, version
from .listener import RelayListener

log = logging.getLogger(__name__)


def build_parser():
    prog = 'python3 -m tuyarelay' if sys.argv[0][-11:] == '__main__.py' else None
    description = 'TuyaRelay [%s]' % (version,)
    parser = argparse.ArgumentParser( prog=prog, description=description )

    # Options for all functions.
    parser.add_argument( '-debug', '-d', help='Enable debug messages', action='store_true' )

    subparser = parser.add_subparsers( dest='command', title='commands (run <command> -h to see usage information)' )
    subparsers = {}
    cmd_list = {
        'run': 'Start the HomeKit bridge',
        'notify': 'Send one on/off notification to the relay peer',
        'find': 'Scan the local network for the configured device',
        'listen': 'Run a relay peer which prints every notification received',
    }
    for sp in cmd_list:
        subparsers[sp] = subparser.add_parser(sp, help=cmd_list[sp])
        subparsers[sp].add_argument( '-debug', '-d', help='Enable debug messages', action='store_true', dest='debug2' )
        subparsers[sp].add_argument( '-nocolor', help='Disable color text output', action='store_true' )
        if sp != 'listen':
            subparsers[sp].add_argument( '-config-file', help='JSON file to load the configuration from [Default: %s]' % CONFIGFILE, default=CONFIGFILE, metavar='FILE' )

    subparsers['notify'].add_argument( 'state', help='State to send', choices=('on', 'off') )
    subparsers['notify'].add_argument( '-host', help='Relay peer address (overrides the config file)' )
    subparsers['notify'].add_argument( '-port', help='Relay peer port (overrides the config file)', type=int )

    subparsers['listen'].add_argument( '-host', help='Address to listen on [Default: 0.0.0.0]', default='0.0.0.0' )
    subparsers['listen'].add_argument( '-port', help='Port to listen on [Default: %d]' % RELAYPORT, default=RELAYPORT, type=int )

    if HAVE_ARGCOMPLETE:
        argcomplete.autocomplete( parser )

    return parser


def notify(args):
    bold, subbold, normal, dim, alert, alertdim, cyan, red, yellow = termcolor(not args.nocolor)
    if args.host:
        target = RelayTarget(args.host, args.port or RELAYPORT, 5.0)
    else:
        target = load_config(args.config_file).relay
        if args.port:
            target = target._replace(port=args.port)

    err = asyncio.run(RelayClient(target).notify(args.state == 'on'))
    if err:
        print("%s    Relay to %s:%s failed: %s%s" % (alert, target.host, target.port, err['Error'], normal))
        print("%s    %s%s" % (alertdim, err['Payload'], normal))
        return 1
    print("%s    Sent %s%s%s to %s:%s%s" % (dim, subbold, args.state, dim, target.host, target.port, normal))
    return 0


def find(args):
    bold, subbold, normal, dim, alert, alertdim, cyan, red, yellow = termcolor(not args.nocolor)
    config = load_config(args.config_file)
    # force a scan even if the address is configured
    link = DeviceLink(config.device._replace(address=None, version=None))
    print("%sScanning for device %s%s%s ...%s" % (dim, cyan, config.device.id, dim, normal))
    if not asyncio.run(link.find()):
        print("%s    Device not found%s" % (alert, normal))
        return 1
    print("%s    Address = %s%s%s  Version = %s%s%s" % (dim, subbold, link.address, dim, subbold, link.version, normal))
    if config.device.address and config.device.address != link.address:
        print("%s    Configured address %s is out of date%s" % (yellow, config.device.address, normal))
    return 0


def listen(args):
    listener = RelayListener(args.host, args.port, color=(not args.nocolor))
    try:
        asyncio.run(listener.serve_forever())
    except KeyboardInterrupt:
        pass
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Check for Environmental Overrides
    if os.getenv("DEBUG", "no").lower() == "yes":
        args.debug = True

    if args.debug or getattr(args, 'debug2', False):
        print('Parsed args:', args)
        set_debug(True, color=not getattr(args, 'nocolor', False))
    else:
        logging.basicConfig(format="%(levelname)s [%(asctime)s] %(name)s: %(message)s", level=logging.INFO,
                            datefmt='%d/%b/%y %H:%M:%S')

    try:
        if args.command == 'run':
            run(load_config(args.config_file))
        elif args.command == 'notify':
            return notify(args)
        elif args.command == 'find':
            return find(args)
        elif args.command == 'listen':
            return listen(args)
        else:
            # No command selected - show help
            parser.print_help()
    except ConfigError as e:
        log.error('Configuration error: %s', e)
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())

# End
