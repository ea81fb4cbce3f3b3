# TuyaRelay Module
# -*- coding: utf-8 -*-
"""
 Relay Client - tells a local TCP peer about power changes

 Each notification is a complete connect / write / close cycle carrying the
 bare ASCII token "on" or "off". Nothing is read back. Failures are logged
 and the notification is dropped.

 Functions
    err = await notify(state)         # send one notification, None on success or error dict
    task = notify_nowait(state)       # fire-and-forget notify()
    await drain()                     # wait for in-flight notifications
"""

import asyncio
import logging
import socket

from .const import RELAYTIMEOUT, TOKEN_OFF, TOKEN_ON
from .error_helper import ERR_CONNECT, ERR_TIMEOUT, error_json

log = logging.getLogger(__name__)


def state_token(state):
    return TOKEN_ON if state else TOKEN_OFF


class RelayClient(object):
    def __init__(self, target, loop=None):
        """
        Args:
            target (RelayTarget): host, port and timeout of the peer.
            loop (optional): event loop notify_nowait() submits to when called from another thread.
        """
        self.target = target
        self.loop = loop
        self.sent = 0
        self.failed = 0
        self.last_error = None
        self._pending = set()

    def __repr__(self):
        return "%s( %r, sent=%r, failed=%r )" % (self.__class__.__name__, self.target, self.sent, self.failed)

    @property
    def timeout(self):
        return self.target.timeout if self.target.timeout else RELAYTIMEOUT

    async def notify(self, state):
        """
        Send `state` to the relay peer

        Returns None on success, or an error dict (see error_json) on failure.
        """
        token = state_token(state)
        host, port = self.target.host, self.target.port
        writer = None
        err = None
        try:
            fut = asyncio.open_connection(host, port)
            _, writer = await asyncio.wait_for(fut, timeout=self.timeout)
            log.debug('Connected to relay peer %s:%s', host, port)
            writer.write(token)
            await asyncio.wait_for(writer.drain(), timeout=self.timeout)
            if writer.can_write_eof():
                writer.write_eof()
            writer.close()
            await asyncio.wait_for(writer.wait_closed(), timeout=self.timeout)
            writer = None
        except (asyncio.TimeoutError, socket.timeout):
            err = error_json(ERR_TIMEOUT, 'relay %s:%s' % (host, port))
        except OSError as e:
            err = error_json(ERR_CONNECT, 'relay %s:%s: %s' % (host, port, e))
        except ValueError as e:
            # host name the resolver cannot encode (UnicodeError from the idna codec)
            err = error_json(ERR_CONNECT, 'relay %s:%s: %s' % (host, port, e))
        finally:
            if writer is not None:
                writer.close()

        if err:
            self.failed += 1
            self.last_error = err
            log.error('Relay notification %r to %s:%s dropped: %s', token, host, port, err['Payload'])
            return err

        self.sent += 1
        log.info('Relayed %r to %s:%s', token, host, port)
        return None

    def notify_nowait(self, state):
        """
        Spawn notify(state) without waiting for it

        Returns the asyncio Task (or a concurrent Future when called off the event loop thread).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            if self.loop is None:
                raise RuntimeError('notify_nowait() needs a running event loop')
            return asyncio.run_coroutine_threadsafe(self._notify_tracked(state), self.loop)

        task = loop.create_task(self.notify(state))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _notify_tracked(self, state):
        # submitted from another thread, register with drain() once running on the loop
        task = asyncio.current_task()
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return await self.notify(state)

    async def drain(self):
        """Wait until every in-flight notification has finished"""
        while self._pending:
            await asyncio.gather(*list(self._pending))
