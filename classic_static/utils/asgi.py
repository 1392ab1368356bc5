"""Continuation into the wrapped ASGI application."""

from starlette.types import ASGIApp, Message, Receive, Scope, Send


class NextHandler:
    """Forward the request to the wrapped app, remembering whether it answered.

    Once ``response_started`` is set the wrapped app owns the response and
    nothing else may be sent for this request.
    """

    def __init__(self, app: ASGIApp, scope: Scope, receive: Receive, send: Send) -> None:
        self.app = app
        self.scope = scope
        self.receive = receive
        self.send = send
        self.response_started = False

    async def __call__(self) -> None:
        await self.app(self.scope, self.receive, self._send)

    async def _send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.response_started = True
        await self.send(message)
