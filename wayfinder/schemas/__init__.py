from .capabilities import CapabilityCategory, CapabilityDescriptor, ToolDescriptor, infer_category
from .responses import ToolContentItem, ToolResponse

__all__ = [
    "CapabilityCategory",
    "CapabilityDescriptor",
    "ToolContentItem",
    "ToolDescriptor",
    "ToolResponse",
    "infer_category",
]
