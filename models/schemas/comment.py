from marshmallow import Schema, fields, validate, EXCLUDE

from models.schemas.user import AuthorOutSchema


class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=validate.Length(min=1, max=300))


class CommentOutSchema(Schema):
    id = fields.String()
    post_id = fields.String(data_key="postId")
    content = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    author = fields.Nested(AuthorOutSchema)
