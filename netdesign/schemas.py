from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

from .topology import (
    MAX_BUDGET,
    MAX_COMPANY_SIZE,
    MAX_DEPARTMENT_USERS,
    MAX_DEPARTMENTS,
    MAX_OFFICE_USERS,
    MAX_REMOTE_USERS,
    MAX_TOTAL_PRINTERS,
    MAX_TOTAL_SERVERS,
    NETWORK_TYPES,
    to_count,
)


class Count(fields.Integer):
    """Integer that follows the form's parseInt rule: blanks and junk load as 0."""

    def _deserialize(self, value, attr, data, **kwargs):
        return to_count(value)


def _count(maximum):
    return Count(load_default=0, validate=validate.Range(min=0, max=maximum))


class FormDataSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    companySize = _count(MAX_COMPANY_SIZE)
    budget = _count(MAX_BUDGET)
    officeUsers = _count(MAX_OFFICE_USERS)
    remoteUsers = _count(MAX_REMOTE_USERS)
    servers = _count(MAX_TOTAL_SERVERS)
    printers = _count(MAX_TOTAL_PRINTERS)
    departments = _count(MAX_DEPARTMENTS)


class DepartmentSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(load_default="", validate=validate.Length(max=100))
    users = _count(MAX_DEPARTMENT_USERS)
    servers = _count(MAX_TOTAL_SERVERS)
    printers = _count(MAX_TOTAL_PRINTERS)


class DesignRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    formData = fields.Nested(FormDataSchema, load_default=dict)
    departments = fields.List(
        fields.Nested(DepartmentSchema), load_default=list, validate=validate.Length(max=MAX_DEPARTMENTS)
    )
    networkType = fields.Str(load_default="both", validate=validate.OneOf(NETWORK_TYPES))
    redundancy = fields.Bool(load_default=False)
    securityLevel = fields.Int(load_default=1)
    aiAssist = fields.Bool(load_default=False)
    aiRecommendations = fields.List(fields.Str(), load_default=None, allow_none=True)

    @validates_schema
    def validate_totals(self, data, **kwargs):
        # Server and printer addresses come from running counters shared by all departments
        departments = data.get("departments") or []
        if sum(d.get("servers", 0) for d in departments) > MAX_TOTAL_SERVERS:
            raise ValidationError(f"At most {MAX_TOTAL_SERVERS} servers in total", "departments")
        if sum(d.get("printers", 0) for d in departments) > MAX_TOTAL_PRINTERS:
            raise ValidationError(f"At most {MAX_TOTAL_PRINTERS} printers in total", "departments")


class DesignFromChatSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    collectedInfo = fields.Dict(keys=fields.Str(), values=fields.Str(), load_default=dict)


class ChatMessageSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    role = fields.Str(required=True, validate=validate.OneOf(["user", "assistant", "system"]))
    content = fields.Str(required=True)


class ChatContextSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    questions = fields.List(fields.Str())
    collectedInfo = fields.Dict(keys=fields.Str(), values=fields.Str())
    stage = fields.Str(validate=validate.OneOf(["initial", "gathering", "recommending"]))


class ChatRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    messages = fields.List(fields.Nested(ChatMessageSchema), required=True, validate=validate.Length(min=1))
    context = fields.Nested(ChatContextSchema, load_default=None, allow_none=True)


def _require_object(payload):
    if not isinstance(payload, dict):
        raise ValidationError({"_schema": ["Request body must be a JSON object"]})


def load_design_request(payload) -> dict:
    """Validate a design request body; raises ValidationError."""
    _require_object(payload)
    return DesignRequestSchema().load(payload)


def load_design_from_chat_request(payload) -> dict:
    _require_object(payload)
    return DesignFromChatSchema().load(payload)


def load_chat_request(payload) -> dict:
    _require_object(payload)
    return ChatRequestSchema().load(payload)
