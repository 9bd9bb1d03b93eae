"""Binding request payloads to WTForms."""

from __future__ import annotations

from flask import request
from werkzeug.datastructures import ImmutableMultiDict


def json_object() -> dict:
    """The JSON body when it is an object; lists, strings and bad JSON read as empty."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def bind_form(form_cls, **kwargs):
    """Instantiate ``form_cls`` from a JSON body or from the submitted form data.

    JSON nulls are dropped so optional fields read as missing instead of
    reaching the field parsers as ``None``.
    """
    if request.is_json:
        payload = json_object()
        formdata = ImmutableMultiDict({k: v for k, v in payload.items() if v is not None})
        return form_cls(formdata=formdata, **kwargs)
    return form_cls(**kwargs)


def request_flag(name: str) -> bool:
    """Read a boolean flag from the query string or the JSON body."""
    value = request.args.get(name)
    if value is None and request.is_json:
        value = json_object().get(name)
    return str(value).lower() in ('1', 'true', 'yes')


__all__ = ['json_object', 'bind_form', 'request_flag']
