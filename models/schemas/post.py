from marshmallow import Schema, fields, validate, EXCLUDE

from models.schemas.user import AuthorOutSchema


class PostCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=validate.Length(min=1, max=500))
    image_url = fields.String(data_key="imageUrl", load_default=None, validate=validate.Length(min=1, max=512))


class PostOutSchema(Schema):
    id = fields.String()
    content = fields.String()
    image_url = fields.String(allow_none=True, data_key="imageUrl")
    created_at = fields.DateTime(data_key="createdAt")
    author = fields.Nested(AuthorOutSchema)
    counts = fields.Dict(keys=fields.String(), values=fields.Integer(), data_key="_count")
    liked_by_me = fields.Boolean(data_key="likedByMe")
