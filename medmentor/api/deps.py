# medmentor/api/deps.py
from __future__ import annotations

from fastapi import Request

from medmentor.core.config import Settings
from medmentor.services.gateway_client import ModelGateway
from medmentor.services.repo import Repo


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repo(request: Request) -> Repo:
    return Repo(request.app.state.session_factory)


def get_gateway(request: Request) -> ModelGateway:
    """Shared gateway client; built lazily so a missing key only fails advisor calls."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        gateway = ModelGateway(request.app.state.settings)
        request.app.state.gateway = gateway
    return gateway
