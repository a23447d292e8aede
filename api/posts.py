from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify

from models import storage
from models.post import Post
from models.schemas.post import PostCreateSchema, PostUpdateSchema, PostOutSchema
from utils.decorators import current_identity, ensure_owner, jwt_required
from utils.exceptions import NotFoundError, ValidationError

bp = Blueprint("posts", __name__, url_prefix="/posts")

# Schemas
post_create_schema = PostCreateSchema()
post_update_schema = PostUpdateSchema()
post_out_schema = PostOutSchema()
posts_out_schema = PostOutSchema(many=True)

MAX_LIMIT = 100
# Keep OFFSET well inside every backend's INTEGER range
MAX_OFFSET = 2**31 - 1


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
    except ValueError:
        raise ValidationError("page and limit must be integers")
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))
    if (page - 1) * limit > MAX_OFFSET:
        raise ValidationError("page is out of range")
    return page, limit


def _list_response(query):
    page, limit = parse_pagination()
    total = query.count()
    rows = (
        query.order_by(Post.created_at.desc(), Post.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "data": posts_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


def _get_post_or_404(post_id: str) -> Post:
    post = storage.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


@bp.get("")
@jwt_required()
def list_posts():
    """
    List posts, newest first
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: query
        name: userId
        type: string
        description: Only posts owned by this user
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200:
        description: List of posts
      401:
        description: Missing token
      403:
        description: Invalid or expired token
    """
    query = storage.get_session().query(Post)
    user_id = request.args.get("userId")
    if user_id:
        query = query.filter(Post.user_id == user_id)
    return _list_response(query)


@bp.get("/user/<user_id>")
@jwt_required()
def list_posts_by_user(user_id: str):
    """
    List all posts of one user, newest first
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200:
        description: List of posts by user
    """
    query = storage.get_session().query(Post).filter(Post.user_id == user_id)
    return _list_response(query)


@bp.get("/<post_id>")
@jwt_required()
def get_post(post_id: str):
    """
    Get a single post by id
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
        description: Post found
      404:
        description: Not found
    """
    return jsonify({"data": post_out_schema.dump(_get_post_or_404(post_id))})


@bp.post("")
@jwt_required()
def create_post():
    """
    Create a post owned by the caller
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
        required: true
        schema:
          type: object
          required: [title, text]
          properties:
            title: { type: string, maxLength: 255 }
            text: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = post_create_schema.load(payload)

    post = Post(title=data["title"], text=data["text"], user_id=current_identity().user_id)
    storage.new(post)
    storage.save()
    return jsonify({"data": post_out_schema.dump(post)}), 201


@bp.put("/<post_id>")
@jwt_required()
def update_post(post_id: str):
    """
    Update a post (owner only)
    ---
    tags:
      - Posts
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
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255 }
            text: { type: string }
    responses:
      200:
        description: Updated
      400:
        description: Validation error
      403:
        description: Not the owner
      404:
        description: Not found
    """
    post = _get_post_or_404(post_id)
    ensure_owner(post.user_id, "Not authorized to update this post")

    payload = request.get_json(silent=True) or {}
    data = post_update_schema.load(payload)
    for field in ("title", "text"):
        if field in data:
            setattr(post, field, data[field])

    storage.new(post)
    storage.save()
    return jsonify({"data": post_out_schema.dump(post)})


@bp.delete("/<post_id>")
@jwt_required()
def delete_post(post_id: str):
    """
    Delete a post and its comments (owner only)
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
        description: Deleted
      403:
        description: Not the owner
      404:
        description: Not found
    """
    post = _get_post_or_404(post_id)
    ensure_owner(post.user_id, "Not authorized to delete this post")

    post.delete()
    storage.save()
    return jsonify({"message": "Post deleted", "data": {"id": post_id}})
