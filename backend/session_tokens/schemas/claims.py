"""Marshmallow schema for the identity claims carried by every token."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import RAISE, Schema, fields, validate

from session_tokens.core.constants import Role

# Claims added by the signer rather than taken from the identity
REGISTERED_CLAIMS = frozenset({"iat", "exp", "nbf", "iss", "type", "jti", "id"})


class ClaimsSchema(Schema):
    """
    Wire shape of the identity claims.

    Attribute names are snake_case; ``data_key`` keeps the camelCase names
    used on the wire. Missing and unknown fields are rejected.
    """

    class Meta:
        unknown = RAISE

    sub = fields.String(required=True, validate=validate.Length(min=1))
    role = fields.String(required=True, validate=validate.OneOf([r.value for r in Role]))
    tenant = fields.String(required=True)
    first_name = fields.String(required=True, data_key="firstName")
    last_name = fields.String(required=True, data_key="lastName")
    email = fields.String(required=True)


claims_schema = ClaimsSchema()


def load_claims(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate the identity part of a decoded token payload.

    :param payload: Decoded JWT payload.
    :returns: Snake-cased claim fields.
    :raises marshmallow.ValidationError: On missing, unknown or malformed claims.
    """
    identity_part = {k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS}
    return claims_schema.load(identity_part)


def dump_claims(data: Mapping[str, Any]) -> dict[str, Any]:
    """Render snake-cased claim fields with their wire names."""
    return claims_schema.dump(data)
