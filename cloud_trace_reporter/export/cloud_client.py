"""
Export - Cloud Trace Client

Client Cloud Trace v2 basé sur google-cloud-trace (TraceServiceAsyncClient).

Fonctionnalités:
    - Création du client à la connexion (Application Default Credentials),
      sur la boucle du pipeline
    - Requête BatchWriteSpans construite depuis TraceBatch.to_request()
    - Classification des GoogleAPICallError via SubmissionOutcome.from_status_code
    - Aucun retry côté bibliothèque: le pipeline gère retry et backoff

Example:
    reporter = await create_reporter(CloudTraceClient(), project_id="my-project")
"""

import json
from typing import Any, Callable, Optional

from google.api_core import exceptions as core_exceptions
from google.cloud import trace_v2

from ..model import TraceBatch
from .interfaces import ITraceClient, SubmissionOutcome


ClientFactory = Callable[[], Any]


def build_batch_write_request(project_id: str, batch: TraceBatch) -> trace_v2.BatchWriteSpansRequest:
    """
    Construit la requête protobuf BatchWriteSpans d'un batch.

    Le corps JSON de TraceBatch suit le mapping JSON proto3 de
    google.devtools.cloudtrace.v2.
    """
    return trace_v2.BatchWriteSpansRequest.from_json(json.dumps(batch.to_request(project_id)))


def outcome_from_api_error(error: core_exceptions.GoogleAPICallError) -> SubmissionOutcome:
    """
    Classe une erreur d'appel Google API.

    Le code HTTP de l'exception est utilisé en priorité, le code gRPC sinon.
    Sans code connu, l'erreur est permanente.
    """
    details = f"{type(error).__name__}: {error.message}"
    code = error.code
    if code is None and error.grpc_status_code is not None:
        code = error.grpc_status_code.value[0]
    if code is None:
        return SubmissionOutcome.permanent(details)
    return SubmissionOutcome.from_status_code(int(code), details)


class CloudTraceClient(ITraceClient):
    """
    Client Cloud Trace v2 asynchrone.

    Sans client fourni, un TraceServiceAsyncClient est créé par connect()
    et fermé par close(). Un client fourni reste à la charge de l'appelant.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        """
        Args:
            client: TraceServiceAsyncClient déjà construit (optionnel)
            client_factory: Fabrique du client (défaut: TraceServiceAsyncClient)
        """
        self._client = client
        self._client_factory = client_factory or trace_v2.TraceServiceAsyncClient
        self._owns_client = client is None

    @property
    def client(self) -> Optional[Any]:
        return self._client

    async def connect(self) -> None:
        """
        Crée le client si nécessaire.

        Raises:
            google.auth.exceptions.DefaultCredentialsError: Identifiants absents
        """
        if self._client is None:
            self._client = self._client_factory()

    async def submit_trace_batch(self, project_id: str, batch: TraceBatch) -> SubmissionOutcome:
        if self._client is None:
            await self.connect()

        request = build_batch_write_request(project_id, batch)
        try:
            await self._client.batch_write_spans(request=request, retry=None)
        except core_exceptions.GoogleAPICallError as e:
            return outcome_from_api_error(e)
        return SubmissionOutcome.success()

    async def close(self) -> None:
        if self._client is None or not self._owns_client:
            return
        client, self._client = self._client, None
        await client.transport.close()
