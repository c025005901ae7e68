"""
HTTP implementation of the RemoteGateway port.

Talks to the trainer backend's REST API with httpx. Each call opens a short
lived AsyncClient, attaches the bearer token from the credential store and
maps the response onto domain models or a typed GatewayError.

Status mapping:
- 2xx: body decoded (DecodingError if it cannot be)
- 401: Unauthorized
- 400 with a ``message``: ValidationError
- anything else: ServerError carrying the status code
- no response at all: NetworkError
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, TypeVar

import httpx

from application.exceptions import (
    DecodingError,
    GatewayError,
    NetworkError,
    ServerError,
    Unauthorized,
    ValidationError,
)
from application.ports import CredentialStore
from domain.converters import (
    client_from_api,
    client_to_api,
    exercise_from_api,
    exercise_to_api,
    exercises_from_api,
    meals_to_api,
    nutrition_from_api,
    session_create_payload,
    session_from_api,
    session_update_payload,
)
from domain.models import Client, Exercise, Meal, Nutrition, Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _decode(converter: Callable[[Any], T], data: Any) -> T:
    try:
        return converter(data)
    except (KeyError, TypeError, ValueError) as e:
        raise DecodingError(f"Unexpected response shape: {e}") from e


def _decode_list(converter: Callable[[Any], T], data: Any) -> List[T]:
    if not isinstance(data, list):
        raise DecodingError(f"Expected a JSON array, got {type(data).__name__}")
    return [_decode(converter, item) for item in data]


def _echo_of(sent: Exercise) -> Callable[[Any], Exercise]:
    # The backend stores groupType but drops groupId
    return lambda data: exercise_from_api(data, fallback_group_id=sent.group_id)


class HttpRemoteGateway:
    """
    REST client for clients, sessions, exercises and nutrition plans.

    Usage:
        >>> gateway = HttpRemoteGateway(settings.api_base_url, credentials)
        >>> sessions = await gateway.fetch_sessions("client-1")
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: API root (e.g., "https://my-pt-book-app-backend.vercel.app/api")
            credentials: Source of the bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._timeout = timeout
        self._transport = transport

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    async def fetch_clients(self) -> List[Client]:
        data = await self._request("GET", "/client")
        return _decode_list(client_from_api, data)

    async def create_client(self, client: Client) -> Client:
        data = await self._request("POST", "/client", json=client_to_api(client))
        return _decode(client_from_api, data)

    async def update_client(self, client: Client) -> Client:
        data = await self._request("PUT", f"/client/{client.id}", json=client_to_api(client))
        return _decode(client_from_api, data)

    async def delete_client(self, client_id: str) -> None:
        await self._request("DELETE", f"/client/{client_id}")

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    async def fetch_sessions(self, client_id: str) -> List[Session]:
        data = await self._request("GET", f"/session/client/{client_id}")
        return _decode_list(session_from_api, data)

    async def create_session(self, client_id: str, workout_name: str) -> Session:
        data = await self._request(
            "POST", "/session", json=session_create_payload(client_id, workout_name)
        )
        return _decode(session_from_api, data)

    async def update_session(self, session: Session) -> Session:
        data = await self._request(
            "PUT", f"/session/{session.id}", json=session_update_payload(session)
        )
        return _decode(session_from_api, data)

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/session/{session_id}")

    # -------------------------------------------------------------------------
    # Exercises
    # -------------------------------------------------------------------------

    async def fetch_exercises(self, session_id: str) -> List[Exercise]:
        # The backend answers 404 for a session without exercises
        data = await self._request("GET", f"/exercise/session/{session_id}", missing_ok=True)
        if data is None:
            return []
        return _decode(lambda entries: exercises_from_api(entries, session_id), data)

    async def create_exercise(self, session_id: str, exercise: Exercise) -> Exercise:
        data = await self._request(
            "POST", "/exercise", json=exercise_to_api(exercise, session_id)
        )
        return _decode(_echo_of(exercise), data)

    async def update_exercise(self, exercise: Exercise) -> Exercise:
        data = await self._request(
            "PUT", f"/exercise/{exercise.id}", json=exercise_to_api(exercise)
        )
        return _decode(_echo_of(exercise), data)

    async def delete_exercise(self, exercise_id: str) -> None:
        await self._request("DELETE", f"/exercise/{exercise_id}")

    # -------------------------------------------------------------------------
    # Nutrition
    # -------------------------------------------------------------------------

    async def fetch_nutrition(self, client_id: str) -> Nutrition:
        """Fetch a client's plan; a client without one gets an empty plan."""
        data = await self._request("GET", f"/nutrition/client/{client_id}", missing_ok=True)
        if data is None:
            return Nutrition(client_id=client_id)
        return _decode(nutrition_from_api, data)

    async def create_nutrition(self, client_id: str, meals: Sequence[Meal]) -> Nutrition:
        data = await self._request(
            "POST", "/nutrition", json={"client": client_id, "meals": meals_to_api(meals)}
        )
        return _decode(nutrition_from_api, data)

    async def update_nutrition(self, nutrition_id: str, meals: Sequence[Meal]) -> Nutrition:
        data = await self._request(
            "PUT", f"/nutrition/{nutrition_id}", json={"meals": meals_to_api(meals)}
        )
        return _decode(nutrition_from_api, data)

    async def delete_nutrition(self, nutrition_id: str) -> None:
        await self._request("DELETE", f"/nutrition/{nutrition_id}")

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        missing_ok: bool = False,
    ) -> Any:
        """
        Send one authenticated request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the base URL
            json: Optional request body
            missing_ok: Return None instead of raising on 404

        Returns:
            Parsed JSON, or None for an empty body.

        Raises:
            Unauthorized: If no token is available or the server answers 401
            ValidationError: On 400 with a message
            ServerError: On any other non-2xx status
            NetworkError: If the server could not be reached
            DecodingError: If a 2xx body is not JSON
        """
        token = self._credentials.get_token()
        if not token:
            raise Unauthorized("No credential available")

        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {token}"}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"API timeout: {method} {path}: {e}")
            raise NetworkError(e) from e
        except httpx.TransportError as e:
            logger.error(f"API unavailable: {method} {path}: {e}")
            raise NetworkError(e) from e

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise DecodingError(f"Response body is not JSON: {e}") from e

        if missing_ok and response.status_code == 404:
            return None

        logger.error(f"API error: {method} {path}: {response.status_code} - {response.text}")
        raise self._error_for(response)

    @staticmethod
    def _error_for(response: httpx.Response) -> GatewayError:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        message = None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            message = body["message"]

        if status == 401:
            return Unauthorized(message or "Not authorized")
        if status == 400 and message:
            errors = body.get("errors")
            if isinstance(errors, list) and errors:
                return ValidationError([str(error) for error in errors])
            return ValidationError([message])
        return ServerError(message or f"status {status}", status)
