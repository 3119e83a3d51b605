"""Automation control endpoints: status, stop/restart/run, runtime config."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from primebets.api.deps import get_manager
from primebets.automations import AutomationManager
from primebets.core.errors import UnknownAutomationError
from primebets.core.scheduler import JobStatus

router = APIRouter(prefix="/automations", tags=["automations"])


def _require_known(name: str) -> None:
    if name not in AutomationManager.names():
        raise HTTPException(status_code=404, detail=f"Unknown automation: {name}")


@router.get("", response_model=list[JobStatus])
async def list_automations(manager: AutomationManager = Depends(get_manager)):
    return manager.status()


@router.post("/stop-all")
async def stop_all(manager: AutomationManager = Depends(get_manager)):
    manager.stop_all()
    return {"status": "stopped"}


@router.post("/restart-all")
async def restart_all(manager: AutomationManager = Depends(get_manager)):
    manager.restart_all()
    return {"status": "restarted"}


@router.get("/config")
async def get_config(manager: AutomationManager = Depends(get_manager)):
    return manager.get_config()


@router.delete("/config")
async def reset_config(manager: AutomationManager = Depends(get_manager)):
    manager.reset_config()
    return manager.get_config()


@router.patch("/{name}/config")
async def update_config(
    name: str,
    partial: dict[str, Any] = Body(...),
    manager: AutomationManager = Depends(get_manager),
):
    try:
        cfg = manager.update_config(name, partial)
    except UnknownAutomationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return cfg.model_dump()


@router.post("/{name}/stop")
async def stop(name: str, manager: AutomationManager = Depends(get_manager)):
    _require_known(name)
    manager.stop(name)
    return {"status": "stopped", "name": name}


@router.post("/{name}/restart")
async def restart(name: str, manager: AutomationManager = Depends(get_manager)):
    _require_known(name)
    manager.restart(name)
    return {"status": "restarted", "name": name}


@router.post("/{name}/run")
async def run_now(name: str, manager: AutomationManager = Depends(get_manager)):
    _require_known(name)
    task = manager.run_now(name)
    return {"status": "started" if task else "skipped", "name": name}
