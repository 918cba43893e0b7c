# coding: utf8
from flask import current_app, request
from flask_restx import Namespace, Resource

from app.errors.exceptions import BadRequest, Unauthorized
from app.lib.logger import logger
from app.lib.response import Response
import const

ns = Namespace(name="webhooks", description="Payment provider callbacks")


@ns.route("/payment")
class APIPaymentWebhook(Resource):

    def post(self):
        payment_gateway = current_app.extensions["payment_gateway"]
        raw_body = request.get_data()
        signature = request.headers.get(const.WEBHOOK_SIGNATURE_HEADER)
        if not payment_gateway.verify_webhook_signature(raw_body, signature):
            logger.warning(f"Payment webhook rejected: bad signature from {request.remote_addr}")
            raise Unauthorized(message="Invalid webhook signature")

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise BadRequest(message="Invalid webhook payload")

        order_service = current_app.extensions["order_service"]
        result = order_service.handle_payment_webhook(payload)
        return Response(data=result, message=result["message"]).to_dict()
