from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker
from storefront.core_settings import Settings, get_settings
from storefront.infrastructure.db import get_session_factory
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.application.auth_service import AuthService
from storefront.application.customer_service import CustomerService
from shared.core import set_request_context

BEARER_PREFIX = "Bearer "

def get_uow(session_factory: sessionmaker = Depends(get_session_factory)) -> UnitOfWork:
    return UnitOfWork(session_factory)

def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):].strip()

def require_admin(
    request: Request,
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
) -> str:
    username = AuthService(uow, settings).authenticate(_bearer_token(request))
    set_request_context(user_id=username)
    return username

def require_customer(
    request: Request,
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
) -> str:
    user_id = CustomerService(uow, settings).authenticate(_bearer_token(request))
    set_request_context(user_id=user_id)
    return user_id
