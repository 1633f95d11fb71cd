"""Request gate: the HTTP middleware deciding pass, rewrite, redirect or deny."""

from .gate import GateContext, RequestGate
from .routes import RouteClass, RouteTable

__all__ = ["GateContext", "RequestGate", "RouteClass", "RouteTable"]
