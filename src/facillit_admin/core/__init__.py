"""Core console logic.

Modules:
- access_gate: administrator check for every protected request
- catalog: metric catalog and icon enumeration
- list_view: snapshot list base with patch-after-success actions
- students: student list, filters and detail presentation
- achievements: achievement editor, target coercion and labels
- themes: writing theme draft, cover upload and save
- dashboard: headline counts
"""

__all__ = [
    "access_gate",
    "catalog",
    "list_view",
    "students",
    "achievements",
    "themes",
    "dashboard",
]
