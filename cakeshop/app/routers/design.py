"""Design-wizard sessions for the cake design assistant."""
from fastapi import APIRouter, Depends

from ...agents.design_agent import DesignAgent
from ...schemas.io_models import DesignActionRequest, DesignSessionCreate
from ..errors import NotFoundError

router = APIRouter(prefix="/design")

_agent = None


def get_design_agent() -> DesignAgent:
    # Built lazily so importing the app never opens a Redis connection
    global _agent
    if _agent is None:
        _agent = DesignAgent()
    return _agent


@router.post("/sessions")
async def create_session(body: DesignSessionCreate, agent: DesignAgent = Depends(get_design_agent)):
    return {"success": True, "data": agent.start(body.session_id)}


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, agent: DesignAgent = Depends(get_design_agent)):
    return {"success": True, "data": agent.describe(session_id)}


@router.post("/sessions/{session_id}/actions")
async def apply_action(
    session_id: str,
    body: DesignActionRequest,
    agent: DesignAgent = Depends(get_design_agent),
):
    return {"success": True, "data": agent.handle(session_id, body.action, body.params)}


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str, agent: DesignAgent = Depends(get_design_agent)):
    if not agent.end(session_id):
        raise NotFoundError("Design session not found")
    return {"success": True}
