from marshmallow import EXCLUDE, Schema, fields, validates_schema, ValidationError

from models.schemas.common import validate_max_length, validate_not_blank

TITLE_MAX = 255


class PostCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=[validate_not_blank, validate_max_length(TITLE_MAX)])
    text = fields.String(required=True, validate=validate_not_blank)


class PostUpdateSchema(Schema):
    # All optional, but validate if present
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=[validate_not_blank, validate_max_length(TITLE_MAX)])
    text = fields.String(validate=validate_not_blank)

    @validates_schema
    def _require_something(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide at least one of: title, text.")


class PostOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    text = fields.String()
    user_id = fields.String(data_key="userId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
