# coding: utf8
from flask import current_app, redirect, request
from flask_restx import Namespace, Resource

from app.decorators import jwt_optional, parameters
from app.errors.exceptions import Unauthorized
from app.lib.response import Response
from app.services.auth import AuthService

ns = Namespace(name="downloads", description="Download token API")


@ns.route("/generate-token")
class APIGenerateDownloadToken(Resource):

    @jwt_optional
    @parameters(
        type="object",
        properties={
            "order_item_id": {"type": "integer"},
            "product_id": {"type": "integer"},
            "confirmation_token": {"type": "string", "minLength": 1},
        },
        required=["order_item_id"],
    )
    def post(self, args):
        customer = AuthService.get_current_customer()
        confirmation_token = args.get("confirmation_token")
        if not customer and not confirmation_token:
            raise Unauthorized(message="Customer login or confirmation token required")

        download_service = current_app.extensions["download_service"]
        download_token = download_service.generate_token(
            args["order_item_id"],
            customer_id=customer.id if customer else None,
            product_id=args.get("product_id"),
            confirmation_token=confirmation_token,
        )
        return Response(
            data={
                "token": download_token.token,
                "expires_at": download_token.to_dict()["expires_at"],
                "downloads_remaining": download_token.downloads_remaining,
            }
        ).to_dict()


def _redeem(token, file_id=None):
    download_service = current_app.extensions["download_service"]
    result = download_service.redeem(
        token, file_id=file_id, ip_address=request.remote_addr
    )
    return redirect(result["url"], code=302)


@ns.route("/<string:token>")
class APIDownload(Resource):

    def get(self, token):
        return _redeem(token)


@ns.route("/<string:token>/<string:file_id>")
class APIDownloadFile(Resource):

    def get(self, token, file_id):
        return _redeem(token, file_id)
