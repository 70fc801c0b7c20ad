"""FastAPI dependencies."""

from fastapi import Request

from ..config.models import ProxyConfig
from ..database.dispatcher import Dispatcher


def get_config(request: Request) -> ProxyConfig:
    return request.app.state.config


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher
