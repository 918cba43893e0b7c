# coding: utf8
from flask import current_app
from flask_restx import Namespace, Resource

from app.lib.response import Response

ns = Namespace(name="order-confirmation", description="Public thank-you page API")


@ns.route("/<string:token>")
class APIOrderConfirmation(Resource):

    def get(self, token):
        order_service = current_app.extensions["order_service"]
        return Response(data=order_service.get_confirmation(token)).to_dict()
