"""Image upload, deletion and migration endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated

from litestar import Controller, Request, delete, get, post
from litestar.datastructures import UploadFile
from litestar.enums import RequestEncodingType
from litestar.exceptions import ValidationException
from litestar.params import Body, Parameter
from litestar.response import Response

from easel.lib.categories import resolve_category
from easel.lib.storage import MediaGateway
from easel.lib.uploads import UploadedFile, UploadValidationError, validate_upload


@dataclass
class ImageUploadForm:
    file: UploadFile | None = None
    category: str = "gallery"


@dataclass
class MultipleImageUploadForm:
    files: list[UploadFile] = field(default_factory=list)
    category: str = "gallery"


async def read_upload(upload: UploadFile | None) -> UploadedFile | None:
    """Turn a multipart file part into the gateway's upload payload."""
    if upload is None:
        return None
    content = await upload.read()
    return UploadedFile(
        data=content,
        content_type=upload.content_type or "application/octet-stream",
        filename=upload.filename or "untitled",
    )


def _owner_id(request: Request) -> str | None:
    user = request.scope.get("user")
    user_id = getattr(user, "id", None)
    return str(user_id) if user_id is not None else None


class ImagesController(Controller):
    """JSON API over the media gateway."""

    path = "/api/images"

    @post("/upload")
    async def upload_image(
        self,
        request: Request,
        data: Annotated[ImageUploadForm, Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> Response:
        gateway: MediaGateway = request.app.state.media_gateway
        config = request.app.state.settings.media

        file = await read_upload(data.file)
        try:
            validate_upload(file, config.max_upload_size, config.allowed_types)
        except UploadValidationError as exc:
            raise ValidationException(detail=str(exc)) from exc

        result = await gateway.upload(file, resolve_category(data.category), _owner_id(request))
        if not result.success:
            raise ValidationException(detail=result.error or "Image upload failed")

        return Response(content=result.to_dict(), status_code=201, media_type="application/json")

    @post("/upload-multiple")
    async def upload_images(
        self,
        request: Request,
        data: Annotated[MultipleImageUploadForm, Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> Response:
        gateway: MediaGateway = request.app.state.media_gateway
        config = request.app.state.settings.media

        if not data.files:
            raise ValidationException(detail="No files uploaded")
        if len(data.files) > config.max_batch_files:
            raise ValidationException(
                detail=f"Too many files. Maximum is {config.max_batch_files} per request."
            )

        files = [await read_upload(upload) for upload in data.files]
        batch = await gateway.upload_multiple(
            [f for f in files if f is not None],
            resolve_category(data.category),
            _owner_id(request),
        )
        return Response(content=batch.to_dict(), status_code=200, media_type="application/json")

    @get("/optimized")
    async def optimized_url(
        self,
        request: Request,
        ref: str,
        width: int | None = None,
        height: int | None = None,
        crop: str | None = None,
        quality: str | None = "auto",
        fmt: Annotated[str | None, Parameter(query="format")] = "auto",
    ) -> dict:
        gateway: MediaGateway = request.app.state.media_gateway
        url = gateway.get_optimized_url(
            ref, width=width, height=height, crop=crop, quality=quality, format=fmt
        )
        if url is None:
            raise ValidationException(detail="Unrecognised asset reference")
        return {"url": url, "optimized": url != gateway.get_delivery_url(ref)}

    @delete("/", status_code=200)
    async def delete_image(self, request: Request, ref: str) -> Response:
        gateway: MediaGateway = request.app.state.media_gateway
        result = await gateway.delete_asset(ref)
        return Response(
            content=result.to_dict(),
            status_code=200 if result.success else 400,
            media_type="application/json",
        )

    @post("/migrate/{file_id:int}")
    async def migrate_image(
        self,
        request: Request,
        file_id: int,
        category: str | None = None,
    ) -> Response:
        gateway: MediaGateway = request.app.state.media_gateway
        result = await gateway.migrate(file_id, category)
        return Response(
            content=result.to_dict(),
            status_code=200 if result.success else 400,
            media_type="application/json",
        )

    @post("/cleanup", status_code=200)
    async def cleanup_migrated(self, request: Request, file_id: int | None = None) -> dict:
        gateway: MediaGateway = request.app.state.media_gateway
        purged = await gateway.cleanup_migrated(file_id)
        return {"success": True, "purged": purged}
