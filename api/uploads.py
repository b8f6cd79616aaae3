"""
Image uploads: POST /uploads stores one image (field "image") under
UPLOAD_FOLDER with a random name; GET /uploads/<name> serves it back.
"""
from __future__ import annotations

import logging
import os
import secrets

from flask import Blueprint, request, jsonify, g, abort, current_app, send_from_directory

from utils.decorators import jwt_required

logger = logging.getLogger(__name__)

bp = Blueprint("uploads", __name__, url_prefix="/uploads")


@bp.post("")
@jwt_required()
def upload_image():
    """
    Upload an image (JPG, PNG or WEBP, up to 5MB)
    ---
    tags:
      - Uploads
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: image
        type: file
        required: true
    responses:
      201:
        description: Created; body has the file url
      400:
        description: No file, or unsupported type
      413:
        description: File too large
    """
    file = request.files.get("image")
    if file is None or not file.filename:
        abort(400, description="No file uploaded")

    allowed = current_app.config["ALLOWED_IMAGE_TYPES"]
    if file.mimetype not in allowed:
        abort(400, description="Only JPG, PNG, WEBP allowed")

    # extension follows the declared type, never the client filename
    name = f"{secrets.token_hex(16)}{allowed[file.mimetype]}"

    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    file.save(os.path.join(folder, name))
    logger.info("user %s uploaded %s", g.current_identity.id, name)

    return jsonify({"url": f"/uploads/{name}"}), 201


@bp.get("/<path:name>")
def serve_upload(name: str):
    """
    Serve an uploaded image
    ---
    tags:
      - Uploads
    parameters:
      - in: path
        name: name
        type: string
        required: true
    responses:
      200:
        description: The image
      404:
        description: Not found
    """
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], name)
