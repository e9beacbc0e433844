from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from gradebook.core.security.auth import get_current_user
from gradebook.schemas.user import CurrentUser
from gradebook.services.file_storage import FileStorage, get_file_storage

router = APIRouter(prefix="/files", tags=["files"])

@router.get("/{filename}")
def download_file(
    filename: str,
    current_user: CurrentUser = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    """
    Download a stored submission file
    """
    file_path = storage.resolve_path(filename)
    # Stored names are "<uuid>_<original name>"
    original_name = filename.split("_", 1)[-1]
    return FileResponse(
        file_path,
        filename=original_name,
        media_type="application/octet-stream",
    )
