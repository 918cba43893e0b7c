from app.lib.logger import logger


class Response:

    def __init__(self, code=200, message="", data=None, status=200, **extra):
        try:
            self.status = status
            self.message = message
            self.data = data if data is not None else {}
            self.code = code
            self.extra = extra
        except Exception as e:
            logger.error(f"Error in Response __init__: {e}", exc_info=True)
            self.status = 500
            self.message = "Internal Server Error"
            self.data = {}
            self.code = 500
            self.extra = {}

    def to_dict(self):
        try:
            body = {
                "code": self.code,
                "message": self.message,
                "data": self.data,
            }
            body.update(self.extra)
            return body, self.status
        except Exception as e:
            logger.error(f"Error in Response to_dict: {e}", exc_info=True)
            return {"code": 500, "message": "Internal Server Error", "data": {}}, 500
