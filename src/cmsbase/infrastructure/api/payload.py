"""Reading write and auth request bodies.

Bodies arrive as multipart forms (with or without files), urlencoded forms
or JSON objects. All of them are reduced to a :class:`WritePayload`.
"""

from json import JSONDecodeError

from fastapi import HTTPException, Request, status
from starlette.datastructures import UploadFile

from cmsbase.application.services import WritePayload
from cmsbase.domain.entities import UploadedFile


async def read_payload(request: Request) -> WritePayload:
    """Split a request body into text fields and uploaded files.

    Raises:
        HTTPException: 400 if a JSON body is malformed or not an object.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        raw = await request.body()
        if not raw.strip():
            return WritePayload(is_form=False)
        try:
            data = await request.json()
        except (JSONDecodeError, UnicodeDecodeError):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed JSON body") from None
        if not isinstance(data, dict):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body must be a JSON object",
            )
        return WritePayload(fields=data, is_form=False)

    if not content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        return WritePayload()

    form = await request.form()
    payload = WritePayload()
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            payload.files.append(
                UploadedFile(
                    field_name=key,
                    filename=value.filename or key,
                    mime_type=value.content_type or "application/octet-stream",
                    content=await value.read(),
                )
            )
        else:
            payload.fields[key] = value
    return payload
