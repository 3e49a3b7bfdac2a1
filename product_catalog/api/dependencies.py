import os
import logging

from fastapi import Header, Request

from product_catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


async def get_authenticated_user_id(
    x_user_id: str = Header(default=None, alias="X-USER-ID"),
) -> int:
    """
    Numeric id of the caller as forwarded by the gateway; 0 means anonymous.
    Token validation happens upstream of this service.
    """
    debug = os.getenv("AUTH_DEBUG", "").lower() in ("1", "true", "yes")
    candidate = (x_user_id or "").strip()
    try:
        user_id = int(candidate) if candidate else 0
    except ValueError:
        user_id = 0
    if debug:
        logger.info("Auth check: header_present=%s user_id=%s", bool(candidate), user_id)
    return max(user_id, 0)
