"""Own-profile endpoints: read, submit an update for approval, delete picture, upload picture."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Request, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.api.deps import get_blob_store, get_workflow
from app.api.v1.auth import authorize_route
from app.core.config import get_settings
from app.core.errors import InputValidationError, ServiceError
from app.schemas.auth import Identity, MessageResponse
from app.schemas.profile import (
    ProfileRequestItem,
    ProfileResponse,
    RequestActionResponse,
    UploadResponse,
)
from app.services.blob_store import BlobStore, store_picture
from app.services.profile_workflow import ProfileWorkflow, parse_changes

logger = logging.getLogger(__name__)

router = APIRouter()

PICTURE_FIELD = "profilePic"


async def _read_update_body(request: Request) -> tuple[dict[str, Any], StarletteUploadFile | None]:
    """Return (text fields, picture file) from a JSON, urlencoded or multipart body."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/json":
        try:
            body = await request.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError (body is not valid UTF-8)
            raise InputValidationError(f"Invalid JSON: {e!s}") from e
        if not isinstance(body, dict):
            raise InputValidationError("Request body must be a JSON object.")
        return body, None
    if content_type in ("multipart/form-data", "application/x-www-form-urlencoded"):
        form = await request.form()
        fields: dict[str, Any] = {}
        picture: StarletteUploadFile | None = None
        for key, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                if key != PICTURE_FIELD:
                    raise InputValidationError(f"Unexpected file field '{key}'.")
                picture = value
            else:
                fields[key] = value
        return fields, picture
    raise InputValidationError("Send the update as JSON or multipart/form-data.")


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    identity: Annotated[Identity, Depends(authorize_route)],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> ProfileResponse:
    """Own profile plus pendingApproval, recomputed on every read."""
    return workflow.get_profile(identity)


@router.put("/profile", response_model=RequestActionResponse)
async def put_profile(
    request: Request,
    identity: Annotated[Identity, Depends(authorize_route)],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
) -> RequestActionResponse:
    """
    Submit a profile update for admin approval; nothing changes until an admin approves.

    Accepts JSON {name, state, profilePic} or multipart/form-data with the same
    text fields and an optional 'profilePic' image file. Only the stored
    picture's reference URL is kept with the request.
    """
    fields, picture = await _read_update_body(request)
    workflow.ensure_can_submit(identity)
    changes = parse_changes(fields, allow_empty=picture is not None)
    if picture is not None:
        content = await picture.read()
        changes[PICTURE_FIELD] = await store_picture(
            blob_store,
            picture.filename,
            content,
            picture.content_type,
            get_settings().BLOB_MAX_BYTES,
        )
    try:
        pending = workflow.submit_update(identity, changes)
    except ServiceError as e:
        if picture is not None:
            logger.warning(
                "Stored picture orphaned by refused submission",
                extra={
                    "user_id": identity.id,
                    "blob_url": changes[PICTURE_FIELD],
                    "error_type": type(e).__name__,
                },
            )
        raise
    return RequestActionResponse(
        message="Profile update submitted for admin approval.",
        request=ProfileRequestItem.model_validate(pending),
    )


@router.delete("/profile/picture", response_model=MessageResponse)
def delete_profile_picture(
    identity: Annotated[Identity, Depends(authorize_route)],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> MessageResponse:
    """Remove the profile picture immediately (no approval step)."""
    workflow.delete_picture(identity)
    return MessageResponse(message="Profile picture deleted.")


@router.post("/upload/profile-pic", response_model=UploadResponse)
async def upload_profile_picture(
    _identity: Annotated[Identity, Depends(authorize_route)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """Store a picture and return its reference URL for use as profilePic."""
    if file is None:
        raise InputValidationError("No file uploaded")
    content = await file.read()
    url = await store_picture(
        blob_store,
        file.filename,
        content,
        file.content_type,
        get_settings().BLOB_MAX_BYTES,
    )
    return UploadResponse(url=url)
