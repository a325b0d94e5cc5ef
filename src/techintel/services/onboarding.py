"""
techintel.services.onboarding

Onboarding catalogs and checklist rules.

Responsibilities:
- Provide the default getting-started checklist for new users.
- Provide the seed catalog of domains, connector presets and watchlist suggestions.
- Score checklist completion.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

TOTAL_STEPS = 6

# Watchlist rows owned by this pseudo-user are suggestions shown to everyone.
SUGGESTIONS_USER = "suggestions"

_DEFAULT_CHECKLIST: list[dict[str, Any]] = [
    {
        "id": "check-1",
        "label": "Complete profile information",
        "completed": False,
        "optional": False,
        "helpText": "Add your name, role, and organization",
    },
    {
        "id": "check-2",
        "label": "Select at least 3 domains of interest",
        "completed": False,
        "optional": False,
        "helpText": "Choose technology areas to monitor",
        "action": "SELECT_DOMAINS",
    },
    {
        "id": "check-3",
        "label": "Enable recommended data connectors",
        "completed": False,
        "optional": False,
        "helpText": "Connect to patent and research databases",
        "action": "CONFIGURE_CONNECTORS",
    },
    {
        "id": "check-4",
        "label": "Add 5+ items to watchlist",
        "completed": False,
        "optional": False,
        "helpText": "Track specific technologies or organizations",
        "action": "BUILD_WATCHLIST",
    },
    {
        "id": "check-5",
        "label": "Set up your first alert",
        "completed": False,
        "optional": True,
        "helpText": "Get notified about important changes",
        "action": "CREATE_ALERT",
    },
    {
        "id": "check-6",
        "label": "Run a sample search",
        "completed": False,
        "optional": True,
        "helpText": "Try one of our recommended searches",
        "action": "RUN_SEARCH",
    },
]

SEED_DOMAINS: list[dict[str, Any]] = [
    {"id": "dom-001", "name": "Artificial Intelligence", "category": "Computing",
     "description": "Machine learning, neural networks, NLP, computer vision", "icon": "ai",
     "technology_count": 1250},
    {"id": "dom-002", "name": "Quantum Computing", "category": "Computing",
     "description": "Quantum processors, algorithms, error correction", "icon": "quantum",
     "technology_count": 450},
    {"id": "dom-003", "name": "Biotechnology", "category": "Life Sciences",
     "description": "Gene editing, synthetic biology, drug discovery", "icon": "biotech",
     "technology_count": 890},
    {"id": "dom-004", "name": "Clean Energy", "category": "Energy",
     "description": "Solar, wind, batteries, hydrogen, carbon capture", "icon": "energy",
     "technology_count": 780},
    {"id": "dom-005", "name": "Robotics", "category": "Engineering",
     "description": "Autonomous systems, industrial robots, drones", "icon": "robotics",
     "technology_count": 620},
    {"id": "dom-006", "name": "Blockchain", "category": "Computing",
     "description": "Distributed ledgers, smart contracts, Web3", "icon": "blockchain",
     "technology_count": 340},
    {"id": "dom-007", "name": "Advanced Materials", "category": "Materials Science",
     "description": "Graphene, metamaterials, nanocomposites", "icon": "materials",
     "technology_count": 520},
    {"id": "dom-008", "name": "Space Technology", "category": "Aerospace",
     "description": "Satellites, launch systems, space exploration", "icon": "space",
     "technology_count": 280},
]

SEED_CONNECTOR_PRESETS: list[dict[str, Any]] = [
    {"id": "conn-001", "name": "USPTO Patents", "provider": "USPTO",
     "description": "US patent database with full-text search", "category": "Patents",
     "recommended": True, "requires_auth": True},
    {"id": "conn-002", "name": "arXiv Research", "provider": "arXiv",
     "description": "Open-access scientific papers", "category": "Research",
     "recommended": True, "requires_auth": False},
    {"id": "conn-003", "name": "Crunchbase", "provider": "Crunchbase",
     "description": "Startup funding and investor data", "category": "Funding",
     "recommended": True, "requires_auth": True},
    {"id": "conn-004", "name": "PubMed", "provider": "NIH",
     "description": "Biomedical research literature", "category": "Research",
     "recommended": False, "requires_auth": False},
    {"id": "conn-005", "name": "European Patents", "provider": "EPO",
     "description": "European patent database", "category": "Patents",
     "recommended": False, "requires_auth": True},
    {"id": "conn-006", "name": "IEEE Xplore", "provider": "IEEE",
     "description": "Technical literature in engineering and technology", "category": "Research",
     "recommended": False, "requires_auth": True},
]

SEED_WATCHLIST_SUGGESTIONS: list[dict[str, Any]] = [
    {"name": "GPT Language Models", "type": "technology",
     "description": "Large language models for text generation", "activity_count": 45},
    {"name": "OpenAI", "type": "organization",
     "description": "Leading AI research organization", "activity_count": 128},
    {"name": "CRISPR", "type": "technology",
     "description": "Gene editing technology", "activity_count": 67},
    {"name": "quantum supremacy", "type": "keyword",
     "description": "Quantum computing milestone", "activity_count": 23},
    {"name": "Solid State Batteries", "type": "technology",
     "description": "Next-generation battery technology", "activity_count": 89},
    {"name": "Tesla", "type": "organization",
     "description": "Electric vehicles and energy storage", "activity_count": 234},
]


def default_checklist() -> list[dict[str, Any]]:
    return copy.deepcopy(_DEFAULT_CHECKLIST)


def checklist_progress(items: Sequence[dict[str, Any]]) -> float:
    if not items:
        return 0.0
    done = sum(1 for item in items if item.get("completed"))
    return round(done / len(items) * 100, 2)
