from .logging_setup import setup_logging
from .settings import *  # noqa: F401,F403
