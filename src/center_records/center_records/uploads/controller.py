from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from flask import Flask, current_app, jsonify, request
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..common.http import admin_required, current_role, error_response
from ..container import Container
from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".csv", ".xlsx", ".xls"}
UPLOAD_FAILED_MESSAGE = "خطأ في معالجة الملف"


def save_upload(file: FileStorage, upload_folder: str | Path) -> Path:
    """Store an uploaded spreadsheet under a unique name; the caller owns deletion."""

    original = secure_filename(file.filename or "")
    ext = Path(file.filename or "").suffix.lower() or Path(original).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"File upload only supports the following filetypes - {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    folder = Path(upload_folder)
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / f"file-{uuid.uuid4().hex}{ext}"
    file.save(target)
    return target


def register(app: Flask, container: Container) -> None:
    @app.route("/api/upload", methods=["POST"], endpoint="api_upload")
    @admin_required
    def api_upload():
        file = request.files.get("file")
        if file is None or not file.filename:
            return error_response(ValidationError("No file uploaded"), message=UPLOAD_FAILED_MESSAGE)

        upload_type = (request.form.get("uploadType") or "").strip()
        if not upload_type:
            return error_response(ValidationError("Upload type is required"), message=UPLOAD_FAILED_MESSAGE)

        try:
            path = save_upload(file, current_app.config["UPLOAD_FOLDER"])
            logger.info("Upload received: type=%s file=%s saved=%s", upload_type, file.filename, path.name)

            summary = container.upload_service.process_upload(
                path,
                upload_type,
                current_role=current_role(),
                session_id=request.form.get("sessionId"),
                center=request.form.get("center"),
            )
        except DomainError as e:
            logger.warning("Upload rejected: %s", e)
            return error_response(e, message=UPLOAD_FAILED_MESSAGE)

        return jsonify(
            {
                "status": "success",
                "message": summary.localized_message,
                "summary": summary.message,
                "details": summary.details(),
                "uploadType": summary.kind.value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
