from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.comment import Comment
from models.post import Post
from models.schemas.comment import CommentCreateSchema, CommentUpdateSchema, CommentOutSchema
from utils.decorators import current_identity, ensure_owner, jwt_required
from utils.exceptions import NotFoundError

bp = Blueprint("comments", __name__, url_prefix="/comments")

create_schema = CommentCreateSchema()
update_schema = CommentUpdateSchema()
out_schema = CommentOutSchema()
out_list_schema = CommentOutSchema(many=True)


def _get_comment_or_404(comment_id: str) -> Comment:
    comment = storage.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


@bp.post("")
@jwt_required()
def add_comment():
    """
    Add a comment to a post
    ---
    tags: [Comments]
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
          required: [postId, content]
          properties:
            postId: { type: string }
            content: { type: string, maxLength: 500 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      404: { description: Post not found }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    if storage.get(Post, data["post_id"]) is None:
        raise NotFoundError("Post not found")

    comment = Comment(
        post_id=data["post_id"],
        content=data["content"],
        commenter_id=current_identity().user_id,
    )
    storage.new(comment)
    storage.save()
    return jsonify({"data": out_schema.dump(comment)}), 201


@bp.get("/<post_id>")
@jwt_required()
def get_comments_by_post(post_id: str):
    """
    Get all comments for a post, oldest first
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: List of comments (may be empty) }
      404: { description: Post not found }
    """
    if storage.get(Post, post_id) is None:
        raise NotFoundError("Post not found")
    rows = (
        storage.get_session()
        .query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id)
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"total": len(rows)}})


@bp.put("/<comment_id>")
@jwt_required()
def update_comment(comment_id: str):
    """
    Update a comment (commenter only)
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [content]
          properties:
            content: { type: string, maxLength: 500 }
    responses:
      200: { description: Updated }
      400: { description: Validation error }
      403: { description: Not the commenter }
      404: { description: Not found }
    """
    comment = _get_comment_or_404(comment_id)
    ensure_owner(comment.commenter_id, "Not authorized to update this comment")

    data = update_schema.load(request.get_json(silent=True) or {})
    comment.content = data["content"]
    storage.new(comment)
    storage.save()
    return jsonify({"data": out_schema.dump(comment)})


@bp.delete("/<comment_id>")
@jwt_required()
def delete_comment(comment_id: str):
    """
    Delete a comment (commenter only)
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not the commenter }
      404: { description: Not found }
    """
    comment = _get_comment_or_404(comment_id)
    ensure_owner(comment.commenter_id, "Not authorized to delete this comment")

    data = out_schema.dump(comment)
    comment.delete()
    storage.save()
    return jsonify({"data": data})
