from marshmallow import ValidationError


def normalize_email(value):
    """Emails are compared case-insensitively; store and look them up lower-cased."""
    return value.strip().lower() if isinstance(value, str) else value


def strip_string(value):
    return value.strip() if isinstance(value, str) else value


def validate_not_blank(value: str) -> None:
    if value is None or not value.strip():
        raise ValidationError("Must not be blank.")


def validate_max_length(limit: int):
    def _validate(value: str) -> None:
        if value is not None and len(value) > limit:
            raise ValidationError(f"Must be at most {limit} characters.")
    return _validate
