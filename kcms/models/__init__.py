"""Database models."""

from kcms.models.models import *  # noqa: F401,F403
from kcms.models.models import __all__  # noqa: F401
