# coding: utf8
from flask import current_app, request
from flask_restx import Namespace, Resource

from app.decorators import seller_required
from app.errors.exceptions import NotFound
from app.lib.response import Response
from app.services.auth import AuthService
from app.services.customer import CustomerService
import const

ns = Namespace(name="customers", description="Seller customer API")


@ns.route("")
class APICustomers(Resource):

    @seller_required
    def get(self):
        data_search = {
            "user_id": AuthService.get_user_id(),
            "page": request.args.get("page", const.DEFAULT_PAGE, type=int),
            "per_page": request.args.get("per_page", const.DEFAULT_PER_PAGE, type=int),
            "search_key": request.args.get("search_key", "", type=str),
        }
        customers = CustomerService.get_customers(data_search)
        return Response(
            data=[customer.to_dict() for customer in customers.items],
            total=customers.total,
            page=customers.page,
            per_page=customers.per_page,
            total_pages=customers.pages,
        ).to_dict()


@ns.route("/<int:id>")
class APICustomerDetail(Resource):

    @seller_required
    def get(self, id):
        customer = CustomerService.find_customer(id, AuthService.get_user_id())
        if not customer:
            raise NotFound(message="Customer not found")

        order_service = current_app.extensions["order_service"]
        data = customer.to_dict()
        data["orders"] = [
            order.to_dict() for order in order_service.get_orders_by_customer(customer.id)
        ]
        return Response(data=data).to_dict()
