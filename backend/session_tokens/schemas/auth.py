"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    class Meta:
        unknown = EXCLUDE

    first_name = fields.String(
        required=True, data_key="firstName", validate=validate.Length(min=1, max=100)
    )
    last_name = fields.String(
        required=True, data_key="lastName", validate=validate.Length(min=1, max=100)
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class SessionResponseSchema(Schema):
    """Response payload after a session is started or rotated."""

    id = fields.Integer(required=True)


class IdentitySchema(Schema):
    """Response payload exposing the authenticated identity (never the password)."""

    id = fields.Integer(required=True)
    role = fields.Function(lambda obj: getattr(obj.role, "value", obj.role))
    tenant = fields.Integer(attribute="tenant_id", allow_none=True)
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    email = fields.Email()
