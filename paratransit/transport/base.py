"""Abstract base class for the backend transport.

Defines the single operation the booking client needs: POST a request
envelope and get the raw response text back.  The HTTP implementation
lives in :mod:`paratransit.transport.http`; tests substitute fakes.
"""

from abc import ABC, abstractmethod


class Transport(ABC):
    """Abstract backend transport.

    The session token is supplied on every call rather than held by the
    transport, so one instance can serve many riders concurrently.
    """

    @abstractmethod
    async def post(
        self,
        body: str,
        session_token: str,
        *,
        use_async_endpoint: bool = False,
    ) -> str:
        """Send a request envelope and return the response body.

        Args:
            body: Complete SOAP request XML.
            session_token: Opaque session cookie from the session manager.
            use_async_endpoint: Post to the asynchronous-result endpoint
                instead of the synchronous one.

        Returns:
            The raw response text.

        Raises:
            BookingError: ``AUTH_FAILURE`` when the session is rejected,
                ``NETWORK_ERROR`` for timeouts, connection failures and
                other non-success responses.
        """

    async def aclose(self) -> None:
        """Release any pooled connections. Safe to call more than once."""
