"""Pydantic schemas for request/response validation."""

from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .notification import *  # noqa: F403
from .rejection import *  # noqa: F403
from .staff import *  # noqa: F403
from .tour import *  # noqa: F403
