# coding: utf8
from flask import current_app, request
from flask_restx import Namespace, Resource

from app.decorators import seller_required
from app.errors.exceptions import BadRequest, NotFound
from app.lib.response import Response
from app.services.auth import AuthService
import const

ns = Namespace(name="orders", description="Seller order API")


@ns.route("")
class APIOrders(Resource):

    @seller_required
    def get(self):
        status = request.args.get("status", "", type=str)
        if status and status not in const.ORDER_STATUSES:
            raise BadRequest(message="Unknown order status")

        order_service = current_app.extensions["order_service"]
        orders = order_service.get_orders(AuthService.get_user_id(), status=status)
        return Response(
            data=[order.to_dict(with_items=True) for order in orders]
        ).to_dict()


@ns.route("/<int:id>")
class APIOrderDetail(Resource):

    @seller_required
    def get(self, id):
        order_service = current_app.extensions["order_service"]
        order = order_service.find_order(id, AuthService.get_user_id())
        if not order:
            raise NotFound(message="Order not found")
        return Response(data=order.to_dict(with_items=True)).to_dict()
