# TuyaRelay Module
# -*- coding: utf-8 -*-

from .const import *
from .exceptions import *
from .error_helper import *
from .config_helper import *
from .StateMirror import *
from .RelayClient import *
from .DeviceLink import *
from .BridgeAdapter import *

from .core import *
from .core import __version__
from .core import __author__
