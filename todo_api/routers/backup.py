from fastapi import APIRouter, Body, Depends, HTTPException, Response
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
from todo_api.models.user import User
from todo_api.database import get_db
from todo_api.services.backup import BackupValidationError, export_backup, import_backup
from todo_api.utils.auth import get_current_user
from todo_api.utils.dates import utcnow

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.get("/export")
def export(
    response: Response,
    download: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    payload = export_backup(db, user)
    if download == "1":
        stamp = utcnow().strftime("%Y%m%d-%H%M")
        response.headers["Content-Disposition"] = f'attachment; filename="backup-{stamp}.json"'
    return payload


@router.post("/import")
def import_(
    body: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Import a backup document. mode=merge (default) appends, mode=replace
    deletes the user's tasks first. Nothing is deduplicated."""
    try:
        result = import_backup(db, user, body.get("todos"), mode=body.get("mode"))
    except BackupValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "ok": True,
        "mode": result["mode"],
        "summary": {"importedTodos": result["imported_todos"], "importedSubs": result["imported_subtasks"]},
    }
