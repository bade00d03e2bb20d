# -*- coding: utf-8 -*-
from importlib.metadata import version
version = version("market_state_ta")

from market_state_ta.exceptions import *
from market_state_ta.exceptions import __all__ as exceptions_all
from market_state_ta.utils import *
from market_state_ta.utils import __all__ as utils_all
from market_state_ta.stateful import *
from market_state_ta.stateful import __all__ as stateful_all

# Vectorised counterpart of the "mss" stateful indicator
from market_state_ta.market_state import market_state

__all__ = [
    "version",
    "market_state",
]

__all__ += exceptions_all + utils_all + stateful_all
