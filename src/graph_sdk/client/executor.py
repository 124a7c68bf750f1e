"""GraphClient – turns :class:`Request` objects into transport calls.

Pipeline for :meth:`GraphClient.handle`:

1. Resolve ``<base>/<graph_version><endpoint>`` (beta host when enabled).
2. Copy request headers onto the transport.
3. Inject ``access_token`` when the request carries a token.
4. Apply the ``appsecret_proof`` policy (added when enabled, stripped when
   disabled).
5. For ``GET`` move every parameter into the URL query string; parameters
   already present in the URL win on conflict and the body is emptied.
6. Send through the transport. Transport errors propagate unchanged.
7. Wrap the reply in a :class:`Response`; error-shaped replies are raised as
   a classified :class:`ResponseError`, never returned.
8. Batch requests are answered with a :class:`BatchResponse`.

Access tokens and proofs are never logged.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping, overload

from graph_sdk.client.errors import ResponseError
from graph_sdk.client.models import (
    AccessToken,
    BatchItem,
    BatchRequest,
    BatchResponse,
    Request,
    Response,
)
from graph_sdk.client.signing import appsecret_proof
from graph_sdk.client.transport import RequestsTransport, Transport
from graph_sdk.client.urls import (
    DEFAULT_GRAPH_VERSION,
    append_params_to_url,
    build_query,
    graph_base_url,
    validate_graph_version,
)
from graph_sdk.utils.logging import get_request_logger

if TYPE_CHECKING:  # pragma: no cover
    from graph_sdk.config import GraphConfig

_LOG = logging.getLogger("graph-sdk.client.executor")

APPSECRET_PROOF_PARAM = "appsecret_proof"
ACCESS_TOKEN_PARAM = "access_token"


class GraphClient:
    """Synchronous Graph API client."""

    def __init__(
        self,
        transport: Transport | None = None,
        graph_version: str = DEFAULT_GRAPH_VERSION,
        use_secret_proof: bool = True,
        use_beta: bool = False,
        app_secret: str | None = None,
    ) -> None:
        validate_graph_version(graph_version)
        self.transport: Transport = transport or RequestsTransport()
        self._graph_version = graph_version
        self.use_secret_proof = bool(use_secret_proof)
        self.use_beta = bool(use_beta)
        # signs caller tokens that carry no secret of their own
        self.app_secret = app_secret or None

    @classmethod
    def from_config(
        cls, config: GraphConfig, transport: Transport | None = None
    ) -> GraphClient:
        """Build a client from a :class:`~graph_sdk.config.GraphConfig`."""
        return cls(
            transport=transport or RequestsTransport(timeout=config.timeout),
            graph_version=config.graph_version,
            use_secret_proof=config.use_secret_proof,
            use_beta=config.use_beta,
            app_secret=config.app_secret,
        )

    # ------------------------------------------------------------------ #
    # Configuration                                                      #
    # ------------------------------------------------------------------ #
    @property
    def graph_version(self) -> str:
        return self._graph_version

    def set_graph_version(self, graph_version: str = DEFAULT_GRAPH_VERSION) -> None:
        self._graph_version = validate_graph_version(graph_version)

    def enable_secret_proof(self, enable: bool = True) -> None:
        self.use_secret_proof = bool(enable)

    def enable_beta(self, enable: bool = True) -> None:
        self.use_beta = bool(enable)

    # ------------------------------------------------------------------ #
    # Execution                                                          #
    # ------------------------------------------------------------------ #
    @overload
    def handle(self, request: BatchRequest) -> BatchResponse: ...

    @overload
    def handle(self, request: Request) -> Response: ...

    def handle(self, request: Request | BatchRequest) -> Response | BatchResponse:
        """Execute *request* and return its reply.

        Raises
        ------
        TransportError
            The transport failed; never retried here.
        ResponseError
            Graph replied with an error (classified subclass).
        """
        outgoing = self._compile_batch(request) if isinstance(request, BatchRequest) else request
        log = get_request_logger(
            base_logger_name=_LOG.name,
            method=outgoing.method,
            endpoint=outgoing.endpoint or "/",
            graph_version=self._graph_version,
        )

        url = self._url_for(outgoing)
        for name, value in outgoing.all_headers().items():
            self.transport.add_request_header(name, value)

        params = self._prepare_params(outgoing)

        if outgoing.method == "GET":
            url = append_params_to_url(url, params)
            params = {}

        log.debug("Dispatching %s %s", outgoing.method, outgoing.endpoint or "/")
        result = self.transport.send(url, outgoing.method, params)

        response = Response(
            request=outgoing,
            raw_body=result.body,
            status_code=result.status_code,
            headers=result.headers,
        )

        if response.is_error:
            exc = ResponseError.create(
                response.raw_body, response.decoded, response.status_code
            )
            log.warning(
                "Graph error status=%s code=%s type=%s",
                exc.status_code,
                exc.code,
                type(exc).__name__,
            )
            raise exc

        if isinstance(request, BatchRequest):
            return BatchResponse(batch_request=request, response=response)
        return response

    def request(
        self,
        access_token: AccessToken | None,
        endpoint: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        etag: str | None = None,
    ) -> Response:
        return self.handle(
            Request(
                method=method,
                endpoint=endpoint,
                params=params or {},
                access_token=access_token,
                etag=etag,
            )
        )

    def get(
        self,
        access_token: AccessToken | None,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        etag: str | None = None,
    ) -> Response:
        return self.request(access_token, endpoint, "GET", params, etag)

    def post(
        self,
        access_token: AccessToken | None,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        etag: str | None = None,
    ) -> Response:
        return self.request(access_token, endpoint, "POST", params, etag)

    def delete(
        self,
        access_token: AccessToken | None,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        etag: str | None = None,
    ) -> Response:
        return self.request(access_token, endpoint, "DELETE", params, etag)

    def batch(
        self,
        requests: Iterable[BatchItem],
        fallback_access_token: AccessToken | None = None,
    ) -> BatchResponse:
        return self.handle(BatchRequest(list(requests), fallback_access_token))

    # ---------------- internal helpers --------------------------------- #
    def _url_for(self, request: Request) -> str:
        base = graph_base_url(use_beta=self.use_beta)
        return f"{base}/{self._graph_version}{request.endpoint}"

    def _prepare_params(self, request: Request) -> dict[str, Any]:
        """Return the request parameters with token and signing policy applied."""
        params: dict[str, Any] = dict(request.params)

        token = request.access_token
        if token is not None:
            params[ACCESS_TOKEN_PARAM] = str(token)

        if self.use_secret_proof:
            if APPSECRET_PROOF_PARAM not in params and token is not None:
                proof = self._secret_proof(token)
                if proof is not None:
                    params[APPSECRET_PROOF_PARAM] = proof
                else:
                    _LOG.debug("No app secret known for token; skipping appsecret_proof")
        else:
            params.pop(APPSECRET_PROOF_PARAM, None)
        return params

    def _secret_proof(self, token: AccessToken) -> str | None:
        proof = token.secret_proof()
        if proof is None and self.app_secret:
            proof = appsecret_proof(str(token), self.app_secret)
        return proof

    def _compile_batch(self, batch: BatchRequest) -> Request:
        """Flatten *batch* into the single POST carrying the ``batch`` param."""
        batch_token = batch.batch_access_token
        entries: list[dict[str, Any]] = []
        for name, sub in zip(batch.names, batch.requests):
            entries.append(self._batch_entry(sub, name, batch_token))

        return Request(
            method="POST",
            endpoint="",
            params={
                "batch": json.dumps(entries, separators=(",", ":")),
                "include_headers": "true",
            },
            access_token=batch_token,
        )

    def _batch_entry(
        self, request: Request, name: str | None, batch_token: AccessToken
    ) -> dict[str, Any]:
        # The batch call authenticates sub-requests sharing its token.
        if request.access_token == batch_token:
            params = self._prepare_params(request.with_access_token(None))
        else:
            params = self._prepare_params(request)

        relative_url = f"/{self._graph_version}{request.endpoint}"
        entry: dict[str, Any] = {
            "headers": [f"{k}: {v}" for k, v in request.all_headers().items()],
            "method": request.method,
        }
        if request.method == "GET":
            entry["relative_url"] = append_params_to_url(relative_url, params)
        else:
            entry["relative_url"] = relative_url
            if params:
                entry["body"] = build_query(params)
        if name is not None:
            entry["name"] = name
        return entry
