# coding: utf8
from flask_restx import Namespace, Resource

from app.decorators import parameters, seller_required
from app.errors.exceptions import Unauthorized
from app.lib.logger import logger
from app.lib.response import Response
from app.services.auth import AuthService
import const

ns = Namespace(name="auth", description="Seller auth API")


def _token_payload(user):
    return {
        "access_token": AuthService.generate_token(user, const.TOKEN_TYPE_SELLER),
        "type": "Bearer",
        "user": user.to_dict(),
    }


@ns.route("/register")
class APIRegister(Resource):

    @parameters(
        type="object",
        properties={
            "email": {"type": "string", "format": "email"},
            "password": {"type": "string", "minLength": 6},
            "name": {"type": "string"},
        },
        required=["email", "password"],
    )
    def post(self, args):
        user = AuthService.register(
            args["email"], args["password"], name=args.get("name", "")
        )
        return Response(
            data=_token_payload(user),
            message="Registered successfully",
            code=201,
            status=201,
        ).to_dict()


@ns.route("/login")
class APILogin(Resource):

    @parameters(
        type="object",
        properties={
            "email": {"type": "string"},
            "password": {"type": "string"},
        },
        required=["email", "password"],
    )
    def post(self, args):
        user = AuthService.login(args["email"], args["password"])
        if not user:
            logger.info(f"Failed login for {args['email']}")
            raise Unauthorized(message="Invalid email or password")

        return Response(
            data=_token_payload(user),
            message="Logged in successfully",
        ).to_dict()


@ns.route("/me")
class APIMe(Resource):

    @seller_required
    def get(self):
        user = AuthService.get_current_identity()
        return Response(data=user.to_dict()).to_dict()
