from marshmallow import Schema, fields, pre_load, validate


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class RegistrationSchema(Schema):
    # no "@" so a login identifier is never both a username and an email
    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=1, max=64),
            validate.Regexp(r"^[^@\s]+$", error="Username must not contain \"@\" or whitespace."),
        ],
    )
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if isinstance(data.get("username"), str):
                data["username"] = data["username"].strip()
        return data


class LoginSchema(Schema):
    # username or email
    login = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("login"), str):
            data = dict(data)
            data["login"] = data["login"].strip()
        return data


class UserIdentitySchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()


class UserListOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    created_at = fields.DateTime()


class SessionOutSchema(Schema):
    access_token = fields.Method("get_access_token")
    refresh_token = fields.Method("get_refresh_token")
    user = fields.Nested(UserIdentitySchema)

    def get_access_token(self, obj):
        return obj.tokens.access_token

    def get_refresh_token(self, obj):
        return obj.tokens.refresh_token
