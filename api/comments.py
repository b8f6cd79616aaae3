from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort
from sqlalchemy.orm import joinedload

from models import storage
from models.comment import Comment
from models.post import Post
from models.schemas.comment import CommentCreateSchema, CommentOutSchema
from utils.decorators import jwt_required

bp = Blueprint("comments", __name__, url_prefix="/comments")

comment_create_schema = CommentCreateSchema()
comment_out_schema = CommentOutSchema()
comments_out_schema = CommentOutSchema(many=True)


@bp.get("/<post_id>")
@jwt_required()
def list_comments(post_id: str):
    """
    Comments on a post, oldest first
    ---
    tags:
      - Comments
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200:
        description: OK
    """
    session = storage.get_session()
    rows = (
        session.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc())
        .all()
    )
    return jsonify({"comments": comments_out_schema.dump(rows)}), 200


@bp.post("/<post_id>")
@jwt_required()
def create_comment(post_id: str):
    """
    Comment on a post
    ---
    tags:
      - Comments
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Invalid input
      404:
        description: Post not found
    """
    data = comment_create_schema.load(request.get_json(silent=True) or {})
    if storage.get(Post, post_id) is None:
        abort(404, description="Post not found")

    comment = Comment(post_id=post_id, author_id=g.current_identity.id, content=data["content"])
    storage.new(comment)
    storage.save()
    return jsonify({"comment": comment_out_schema.dump(comment)}), 201
