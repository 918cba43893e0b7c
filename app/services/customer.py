from sqlalchemy import or_

import const
from app.extensions import db
from app.models.customer import Customer


class CustomerService:

    @staticmethod
    def find_customer(id, user_id=None):
        customer = db.session.get(Customer, id)
        if customer and user_id is not None and customer.user_id != user_id:
            return None
        return customer

    @staticmethod
    def get_customers(data_search):
        query = Customer.query.filter(Customer.user_id == data_search["user_id"])

        search_key = data_search.get("search_key", "")
        if search_key:
            search_pattern = f"%{search_key}%"
            query = query.filter(
                or_(
                    Customer.email.ilike(search_pattern),
                    Customer.first_name.ilike(search_pattern),
                    Customer.last_name.ilike(search_pattern),
                )
            )

        query = query.order_by(Customer.created_at.desc(), Customer.id.desc())
        per_page = min(
            data_search.get("per_page") or const.DEFAULT_PER_PAGE, const.MAX_PER_PAGE
        )
        return query.paginate(
            page=data_search.get("page") or const.DEFAULT_PAGE,
            per_page=per_page,
            error_out=False,
        )
