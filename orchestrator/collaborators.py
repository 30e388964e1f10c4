"""
Orchestrator - External collaborator interfaces.

The core consumes these but never implements them; concrete
lookups live with whoever owns the incident database.
"""

from typing import Any, Dict, List, Protocol


class HistoricalIncidentLookup(Protocol):
    """
    Read-only access to past backlash incidents.

    find_similar returns dicts with at least "incident_id" and
    optionally "description", "similarity" (0-1), "outcome" and
    "occurred_at". An empty list means no similar incident.
    """

    async def find_similar(self, content: str) -> List[Dict[str, Any]]:
        ...
