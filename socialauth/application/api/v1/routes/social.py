"""Social sign-in routes."""

import logging
from datetime import datetime

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from socialauth.application.api.middleware import store_principal
from socialauth.application.api.v1.errors import map_error
from socialauth.config import SocialConfig
from socialauth.domain.social.error import AuthenticationError
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionData
from socialauth.domain.social.service import (
    AuthenticationDispatcher,
    SecurityContextBinder,
    SignupService,
)

logger = logging.getLogger(__name__)


class PendingSignIn(BaseModel):
    """An external account waiting for a local user. Credentials are never exposed."""

    provider_id: str
    provider_user_id: str
    display_name: str | None = None
    profile_url: str | None = None
    image_url: str | None = None

    @classmethod
    def from_data(cls, data: ConnectionData) -> "PendingSignIn":
        return cls(
            provider_id=data.provider_id,
            provider_user_id=data.provider_user_id,
            display_name=data.display_name,
            profile_url=data.profile_url,
            image_url=data.image_url,
        )


class ConnectionResponse(PendingSignIn):
    """A connection created for the signed-in user."""

    created_at: datetime

    @classmethod
    def from_connection(cls, connection: Connection) -> "ConnectionResponse":
        return cls(
            **PendingSignIn.from_data(connection.data).model_dump(),
            created_at=connection.created_at,
        )


def create_router(config: SocialConfig) -> APIRouter:
    """Build the router serving `config.base_path`.

    Signup routes are declared before the provider routes so that "signup"
    is never taken for a provider id.
    """
    router = APIRouter(
        prefix=config.base_path,
        tags=["social"],
        route_class=DishkaRoute,
    )

    @router.get("/signup/pending")
    async def pending_sign_ins(
        request: Request,
        signup: FromDishka[SignupService],
    ) -> list[PendingSignIn]:
        """List external accounts waiting to be connected to a new local user."""
        pending = signup.pending(request.scope.get("session"))
        return [PendingSignIn.from_data(data) for data in pending]

    @router.post("/signup/complete")
    async def complete_signup(
        request: Request,
        signup: FromDishka[SignupService],
        security_context: FromDishka[SecurityContextBinder],
    ) -> list[ConnectionResponse]:
        """Connect every pending external account to the signed-in user."""
        principal = security_context.current()
        if principal is None:
            raise map_error(
                AuthenticationError("Sign in before completing signup", code="not_authenticated")
            )

        connections = await signup.complete(request.scope.get("session"), principal.user_id)
        return [ConnectionResponse.from_connection(c) for c in connections]

    async def dispatch(
        request: Request,
        dispatcher: AuthenticationDispatcher,
        security_context: SecurityContextBinder,
    ) -> RedirectResponse:
        outcome = await dispatcher.dispatch(request)
        # Persist whatever the dispatch left in the security context
        store_principal(request.scope.get("session"), security_context.current())
        logger.debug(
            "Dispatch finished: provider=%s, state=%s, redirect=%s",
            outcome.provider_id,
            outcome.state,
            outcome.redirect_url,
        )
        return RedirectResponse(outcome.redirect_url, status_code=302)

    @router.get("/{provider_id}")
    async def sign_in(
        provider_id: str,
        request: Request,
        dispatcher: FromDishka[AuthenticationDispatcher],
        security_context: FromDishka[SecurityContextBinder],
    ) -> RedirectResponse:
        """Sign in with a provider, or handle the provider's callback."""
        return await dispatch(request, dispatcher, security_context)

    @router.get("/{provider_id}/" + config.connect_segment)
    async def connect(
        provider_id: str,
        request: Request,
        dispatcher: FromDishka[AuthenticationDispatcher],
        security_context: FromDishka[SecurityContextBinder],
    ) -> RedirectResponse:
        """Connect a provider account to the signed-in user."""
        return await dispatch(request, dispatcher, security_context)

    return router
