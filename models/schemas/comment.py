from marshmallow import EXCLUDE, Schema, fields

from models.comment import MAX_CONTENT_LENGTH
from models.schemas.common import validate_max_length, validate_not_blank

_content_rules = [validate_not_blank, validate_max_length(MAX_CONTENT_LENGTH)]


class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    post_id = fields.String(required=True, data_key="postId", validate=validate_not_blank)
    content = fields.String(required=True, validate=_content_rules)


class CommentUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=_content_rules)


class CommentOutSchema(Schema):
    id = fields.String()
    post_id = fields.String(data_key="postId")
    content = fields.String()
    commenter_id = fields.String(data_key="commenter")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
