# app/services/graphql_client.py

from typing import Any, Dict, Optional

import httpx

from app.core import config
from app.core.errors import GraphQLRequestError
from app.core.logger import logger


class GraphQLClient:
    """
    Thin client for the main platform's GraphQL API.

    Every request carries the shared bearer token and is never cached.
    Any failure (transport, HTTP status, GraphQL `errors`, missing `data`)
    raises GraphQLRequestError.
    """

    def __init__(
            self,
            endpoint: Optional[str] = None,
            token: Optional[str] = None,
            timeout: Optional[float] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.endpoint = endpoint if endpoint is not None else config.MAIN_SERVER_GRAPHQL_URL
        self.token = token if token is not None else config.EXTERNAL_API_AUTH_TOKEN
        self.timeout = timeout if timeout is not None else config.GRAPHQL_TIMEOUT_SECONDS
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
            "Cache-Control": "no-store",
        }

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.endpoint:
            raise GraphQLRequestError("MAIN_SERVER_GRAPHQL_URL is not defined in environment variables.")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint,
                    json={"query": query, "variables": variables or {}},
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            logger.error(f"GraphQL transport error: {str(e)}")
            raise GraphQLRequestError(f"GraphQL request failed: {str(e)}") from e

        if response.is_error:
            logger.error(f"GraphQL {response.status_code} detailed error payload: {response.text}")
            raise GraphQLRequestError(
                f"GraphQL fetch failed with status: {response.status_code}. Details: {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise GraphQLRequestError("GraphQL response was not valid JSON.") from e

        if not isinstance(payload, dict):
            raise GraphQLRequestError("GraphQL response was not a JSON object.")

        errors = payload.get("errors")
        if errors:
            messages = ", ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors)
            logger.error(f"GraphQL errors returned: {messages}")
            raise GraphQLRequestError(f"GraphQL Internal Error: {messages}")

        data = payload.get("data")
        if not isinstance(data, dict):
            logger.error("GraphQL response contained no data")
            raise GraphQLRequestError("GraphQL response contained no data.")

        return data
