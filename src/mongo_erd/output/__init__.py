"""
Output module for rendering and persisting ER diagrams.

Supports:
- Mermaid erDiagram text
- YAML relationship reports
"""

from mongo_erd.output.mermaid import DiagramRenderer, sanitize_field, sanitize_type, to_safe_id
from mongo_erd.output.writer import ReportWriter

__all__ = [
    "DiagramRenderer",
    "ReportWriter",
    "sanitize_field",
    "sanitize_type",
    "to_safe_id",
]
