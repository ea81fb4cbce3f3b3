# TuyaRelay Module
# -*- coding: utf-8 -*-

import logging

log = logging.getLogger(__name__)


class StateMirror(object):
    """
    Holds the last known power state of the bulb.

    Both HomeKit requests and device reports write here; whichever write
    runs last wins. `version` increases on every write and `source` names
    the writer, so callers can tell which producer won a race.
    """

    def __init__(self, value=False):
        if not isinstance(value, bool):
            raise TypeError('power state must be a bool, got %r' % (value,))
        self._value = value
        self.version = 0
        self.source = None

    def __repr__(self):
        return "%s( value=%r, version=%r, source=%r )" % (self.__class__.__name__, self._value, self.version, self.source)

    def set(self, value, source=None):
        if not isinstance(value, bool):
            raise TypeError('power state must be a bool, got %r' % (value,))
        self._value = value
        self.version += 1
        self.source = source
        log.debug('mirror <- %r from %s (version %d)', value, source, self.version)

    def get(self):
        return self._value
