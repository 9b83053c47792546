from fastapi import APIRouter, Depends, Response

from saaskit.web.cookies import clear_session_cookie
from saaskit.web.deps import AppDep, SessionDep, require_same_origin
from saaskit.web.openapi import ErrorResponse, SuccessResponse

router = APIRouter(prefix="/api", tags=["account"], dependencies=[Depends(require_same_origin)])


@router.delete(
    "/account",
    summary="Delete account",
    description=(
        "Permanently delete the current user: cancels the Stripe subscription, removes stored files, "
        "deletes the user record and revokes every session."
    ),
    operation_id="deleteAccount",
    responses={
        200: {"description": "Account deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def delete_account(app: AppDep, session: SessionDep, response: Response) -> SuccessResponse:
    await app.delete_account(session)
    clear_session_cookie(response)
    return SuccessResponse(success=True, message="Account and all associated data have been permanently deleted")
