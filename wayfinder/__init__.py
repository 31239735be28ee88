"""
Wayfinder

Routes free-text requests to registered tool capabilities and turns the raw
output of browser automation tools into readable answers:
- Query normalization and entity extraction
- Keyword-confidence intent classification
- Workflow planning and capability routing
- Anchor-windowed response extraction with output guardrails
"""

__version__ = "0.1.0"
