from marshmallow import Schema, fields, pre_load, validate, EXCLUDE


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _InputSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class UserRegisterSchema(_InputSchema):
    email = fields.Email(required=True)
    username = fields.String(required=True, validate=validate.Length(min=3, max=20))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=8, max=72))


class UserLoginSchema(_InputSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=8, max=72))


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    email = fields.String()
    username = fields.String()
    avatar_url = fields.String(allow_none=True, data_key="avatarUrl")


class AuthorOutSchema(Schema):
    """Public view of a user embedded in posts and comments (no email)."""
    id = fields.String()
    username = fields.String()
    avatar_url = fields.String(allow_none=True, data_key="avatarUrl")
