"""Optional web surfaces built on Starlette."""

from .login import login_routes, register_login_routes  # noqa: F401

__all__ = ["login_routes", "register_login_routes"]
