# TuyaRelay Module
# -*- coding: utf-8 -*-


class ConfigError(Exception):
    """Raised at startup when the configuration is missing or invalid"""

    def __init__(self, field, message):
        self.field = field
        super(ConfigError, self).__init__('%s: %s' % (field, message))
