"""Interactive terminal editor for INI configuration files."""

import logging

__version__ = "3.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
