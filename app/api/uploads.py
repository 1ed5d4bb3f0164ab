from fastapi import UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


def read_upload(file: UploadFile | None) -> tuple[str, str | None, bytes] | None:
    if file is None or not file.filename:
        return None
    return file.filename, file.content_type, file.file.read()


def form_model(model: type[BaseModel], **fields):
    """Validate multipart form fields with the same rules as the JSON schema."""
    try:
        return model(**{key: value for key, value in fields.items() if value is not None})
    except PydanticValidationError as exc:
        errors = [{**err, "loc": ("body", *err.get("loc", ()))} for err in exc.errors(include_context=False)]
        raise RequestValidationError(errors) from exc
