"""Core enums package.

Usage:
    from autocrud.core.enums import ErrorCode, Environment, RouteGroup
"""

from autocrud.core.enums.environment import Environment
from autocrud.core.enums.error_code import ErrorCode
from autocrud.core.enums.route_group import IndexMode, RouteGroup

__all__ = ["ErrorCode", "Environment", "IndexMode", "RouteGroup"]
