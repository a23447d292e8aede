from marshmallow import EXCLUDE, Schema, fields, pre_load, validate, validates, ValidationError

from models.schemas.common import normalize_email, strip_string, validate_not_blank

USERNAME_MIN, USERNAME_MAX = 3, 30
PASSWORD_MIN = 6


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=USERNAME_MIN, max=USERNAME_MAX))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = normalize_email(data["email"])
            if "username" in data:
                data["username"] = strip_string(data["username"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < PASSWORD_MIN:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN} characters long.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True, validate=validate_not_blank)
    password = fields.String(required=True, load_only=True, validate=validate_not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = normalize_email(data["email"])
        return data


class RefreshTokenSchema(Schema):
    """Body of /auth/refresh and /auth/logout."""
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate_not_blank)


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
