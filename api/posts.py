from __future__ import annotations

from typing import Dict, Iterable, Set

from flask import Blueprint, request, jsonify, g, abort
from sqlalchemy import func
from sqlalchemy.orm import joinedload

from models import storage
from models.comment import Comment
from models.like import Like
from models.post import Post
from models.schemas.post import PostCreateSchema, PostOutSchema
from utils.decorators import jwt_required

FEED_LIMIT = 50

bp = Blueprint("posts", __name__, url_prefix="/posts")

post_create_schema = PostCreateSchema()
post_out_schema = PostOutSchema()
posts_out_schema = PostOutSchema(many=True)


def _count_by_post(model, post_ids: Iterable[str]) -> Dict[str, int]:
    session = storage.get_session()
    rows = (
        session.query(model.post_id, func.count(model.id))
        .filter(model.post_id.in_(list(post_ids)))
        .group_by(model.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}


def _liked_by(user_id: str, post_ids: Iterable[str]) -> Set[str]:
    session = storage.get_session()
    rows = session.query(Like.post_id).filter(Like.user_id == user_id, Like.post_id.in_(list(post_ids))).all()
    return {post_id for (post_id,) in rows}


def _shape(post: Post, likes: int = 0, comments: int = 0, liked_by_me: bool = False) -> dict:
    return {
        "id": post.id,
        "content": post.content,
        "image_url": post.image_url,
        "created_at": post.created_at,
        "author": post.author,
        "counts": {"likes": likes, "comments": comments},
        "liked_by_me": liked_by_me,
    }


@bp.post("")
@jwt_required()
def create_post():
    """
    Create a post
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            content: { type: string }
            imageUrl: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Invalid input
    """
    data = post_create_schema.load(request.get_json(silent=True) or {})
    post = Post(author_id=g.current_identity.id, content=data["content"], image_url=data.get("image_url"))
    storage.new(post)
    storage.save()
    return jsonify({"post": post_out_schema.dump(_shape(post))}), 201


@bp.post("/<post_id>/like")
@jwt_required()
def toggle_like(post_id: str):
    """
    Like a post, or remove the like if already liked
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200:
        description: OK; body has liked and likesCount
      404:
        description: Post not found
    """
    if storage.get(Post, post_id) is None:
        abort(404, description="Post not found")

    session = storage.get_session()
    user_id = g.current_identity.id
    existing = session.query(Like).filter(Like.user_id == user_id, Like.post_id == post_id).first()
    if existing:
        storage.delete(existing)
    else:
        storage.new(Like(user_id=user_id, post_id=post_id))
    storage.save()

    count = session.query(Like).filter(Like.post_id == post_id).count()
    return jsonify({"liked": existing is None, "likesCount": count}), 200


@bp.get("/feed")
@jwt_required()
def feed():
    """
    Latest posts, newest first
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    responses:
      200:
        description: OK
    """
    session = storage.get_session()
    posts = (
        session.query(Post)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc())
        .limit(FEED_LIMIT)
        .all()
    )
    ids = [p.id for p in posts]
    likes = _count_by_post(Like, ids)
    comments = _count_by_post(Comment, ids)
    mine = _liked_by(g.current_identity.id, ids)

    shaped = [_shape(p, likes.get(p.id, 0), comments.get(p.id, 0), p.id in mine) for p in posts]
    return jsonify({"posts": posts_out_schema.dump(shaped)}), 200
