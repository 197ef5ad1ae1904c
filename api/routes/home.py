from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from api.auth import get_current_user
from models.user import User

router = APIRouter(tags=["Sandbox"])


@router.get("/", response_class=RedirectResponse, status_code=302)
def home(user: User = Depends(get_current_user)):
    """Redirect the requesting user to their sandbox organization page, or to the root if none is linked."""
    return RedirectResponse(url=f"/{user.sandbox_id or ''}", status_code=302)
