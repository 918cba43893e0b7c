# coding: utf8
import traceback

from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import HTTPException

from app.errors.exceptions import BaseError
from app.lib.logger import logger


def api_error_handler(error):
    if isinstance(error, BaseError):
        return error.to_dict(), error.status

    if isinstance(error, (JWTExtendedException, PyJWTError)):
        message = str(error) or "Unauthorized"
        return {"code": 401, "message": message, "error": message}, 401

    if isinstance(error, HTTPException):
        code = error.code or 500
        message = error.description or error.name
        return {"code": code, "message": message, "error": message}, code

    logger.error(f"Unhandled exception: {error}\n{traceback.format_exc()}")
    return (
        {
            "code": 500,
            "message": "Internal Server Error",
            "error": "Internal Server Error",
        },
        500,
    )
