from .bootstrap import bootstrap_engine, metrics_payload
from .engine import RoutingEngine, routing_engine

__all__ = ["RoutingEngine", "bootstrap_engine", "metrics_payload", "routing_engine"]
