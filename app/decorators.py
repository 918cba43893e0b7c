# coding: utf8
from functools import wraps

from flask import request
from flask_jwt_extended import verify_jwt_in_request
from jsonschema import FormatChecker, validate
from jsonschema.exceptions import ValidationError

import const
from app.errors.exceptions import BadRequest, Unauthorized
from app.services.auth import AuthService


def jwt_optional(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            verify_jwt_in_request(optional=True)
        except Exception:
            raise Unauthorized(message="Unauthorized")
        return fn(*args, **kwargs)

    return wrapper


def seller_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            verify_jwt_in_request()
        except Exception:
            raise Unauthorized(message="Unauthorized")

        current_user = AuthService.get_current_identity()
        if not current_user or current_user.status != const.ACTIVE:
            raise Unauthorized(message="Seller not authenticated")
        return fn(*args, **kwargs)

    return wrapper


def customer_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            verify_jwt_in_request()
        except Exception:
            raise Unauthorized(message="Unauthorized")

        customer = AuthService.get_current_customer()
        if not customer or not customer.is_active:
            raise Unauthorized(message="Customer not authenticated")
        return fn(*args, **kwargs)

    return wrapper


def parameters(**schema):
    def decorated(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            req_args = request.args.to_dict()
            if request.method in ("POST", "PUT", "PATCH", "DELETE"):
                if request.is_json:
                    body = request.get_json(silent=True)
                    if isinstance(body, dict):
                        req_args.update(body)
                elif request.mimetype == "multipart/form-data" or request.form:
                    req_args.update(request.form.to_dict())

            req_args = {
                k: v for k, v in req_args.items() if k in schema["properties"].keys()
            }

            for field in schema.get("required", []):
                if field not in req_args or req_args[field] in (None, ""):
                    field_name = schema["properties"].get(field, {}).get("name", field)
                    raise BadRequest(message="{} is required".format(field_name))

            try:
                validate(
                    instance=req_args, schema=schema, format_checker=FormatChecker()
                )
            except ValidationError as exp:
                path = list(exp.absolute_path)
                if path:
                    field = ".".join(str(part) for part in path)
                    message = f"Field '{field}' is not valid: {exp.message}"
                else:
                    message = f"Request parameters are invalid: {exp.message}"
                raise BadRequest(message=message)

            new_args = args + (req_args,)
            return func(*new_args, **kwargs)

        return wrapper

    return decorated
