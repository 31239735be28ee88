from .entities import QueryEntities, SubjectRule, extract_entities
from .intent import IntentClassifier, RoutingIntent
from .keywords import DEFAULT_KEYWORD_TABLES, KeywordTables
from .normalizer import normalize_query
from .planner import CapabilitySelection, ClauseKind, WorkflowPlan, WorkflowPlanner, WorkflowStep
from .routing import CapabilityRouter, RoutingRule

__all__ = [
    "CapabilityRouter",
    "CapabilitySelection",
    "ClauseKind",
    "DEFAULT_KEYWORD_TABLES",
    "IntentClassifier",
    "KeywordTables",
    "QueryEntities",
    "RoutingIntent",
    "RoutingRule",
    "SubjectRule",
    "WorkflowPlan",
    "WorkflowPlanner",
    "WorkflowStep",
    "extract_entities",
    "normalize_query",
]
