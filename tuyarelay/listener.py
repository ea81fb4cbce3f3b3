# TuyaRelay Listener
# -*- coding: utf-8 -*-
"""
 Minimal relay peer for checking a bridge: accepts connections and prints
 each token received ("on" / "off")

    python -m tuyarelay listen [-host 0.0.0.0] [-port 8980]
"""

import asyncio
from collections import deque
import logging
import time

from .core import RELAYPORT, termcolor

log = logging.getLogger(__name__)

# Longest token the peer will accept, anything longer is a misbehaving client
MAX_TOKEN = 16
# Tokens kept in RelayListener.received, oldest dropped first
MAX_HISTORY = 100


class RelayListener(object):
    def __init__(self, host='0.0.0.0', port=RELAYPORT, callback=None, color=True):
        self.host = host
        self.port = port
        self.callback = callback
        self.color = color
        self.received = deque(maxlen=MAX_HISTORY)
        self.server = None

    async def _handle(self, reader, writer):
        peer = writer.get_extra_info('peername')
        data = b''
        try:
            # the token ends at EOF
            while len(data) <= MAX_TOKEN:
                chunk = await reader.read(MAX_TOKEN + 1 - len(data))
                if not chunk:
                    break
                data += chunk
        except OSError as e:
            log.warning('Read from %r failed: %s', peer, e)
            data = b''
        finally:
            writer.close()

        token = data.decode('utf-8', errors='replace')
        self.received.append(token)
        log.debug('%r sent %r', peer, token)
        if self.callback:
            self.callback(token, peer)
        else:
            bold, subbold, normal, dim, alert, alertdim, cyan, red, yellow = termcolor(self.color)
            shade = subbold if token == 'on' else (dim if token == 'off' else alert)
            print("%s%s  %s%-4s %s from %s%s" % (dim, time.strftime('%H:%M:%S'), shade, token, dim, peer, normal))

    async def start(self):
        self.server = await asyncio.start_server(self._handle, self.host, self.port)
        sock = self.server.sockets[0]
        self.port = sock.getsockname()[1]
        log.info('Relay listener on %s:%d', self.host, self.port)
        return self.server

    async def serve_forever(self):
        if self.server is None:
            await self.start()
        async with self.server:
            await self.server.serve_forever()

    async def close(self):
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
