from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data
from techintel.api.errors import db_errors
from techintel.db.base import utcnow
from techintel.db.models import KgEdge, KgNode
from techintel.db.repositories.technology import KgEdgeRepo, KgNodeRepo

router = APIRouter()


def _node(node: KgNode) -> dict[str, Any]:
    return {
        "id": node.node_id,
        "type": node.node_type,
        "label": node.label,
        "description": node.description,
        "size": node.size,
        "color": node.color,
        "metadata": node.meta,
    }


def _edge(edge: KgEdge) -> dict[str, Any]:
    return {
        "source": edge.source_node_id,
        "target": edge.target_node_id,
        "type": edge.edge_type,
        "weight": float(edge.weight),
        "label": edge.label,
    }


def center_node_id(nodes: list[dict[str, Any]], fallback: str) -> str:
    # The technology's own node, else the first node, else the technology id.
    for node in nodes:
        if node["type"] == "technology":
            return node["id"]
    return nodes[0]["id"] if nodes else fallback


@router.get("")
async def knowledge_graph(
    technology_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch knowledge graph"):
        nodes = [_node(n) for n in await KgNodeRepo(session).find(KgNode.technology_id == technology_id)]
        edges = [_edge(e) for e in await KgEdgeRepo(session).find(KgEdge.technology_id == technology_id)]

    return data(
        {
            "graph": {
                "nodes": nodes,
                "edges": edges,
                "centerNodeId": center_node_id(nodes, str(technology_id)),
            },
            "generatedAt": utcnow().isoformat(),
        },
        tech_id=str(technology_id),
    )
