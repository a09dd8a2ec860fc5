"""Query endpoints following a validate-then-run contract.

Every endpoint validates a flat map of request parameters, then runs against
a QuerySession and answers with a payload of the form
{"info": ..., "header": ..., "data": ...}.
"""

from typing import Any, Mapping

import structlog
from pydantic import BaseModel

from connectivity_pipeline.gene_mapping import check_signature, resolve_signature
from connectivity_pipeline.query.assembler import assemble_histogram, assemble_records
from connectivity_pipeline.query.features import DEFAULT_FEATURES
from connectivity_pipeline.query.filters import filter_by_pwids, is_specified, limit_rows
from connectivity_pipeline.query.params import (
    AnnotationQuery,
    HistogramQuery,
    InvalidRequestError,
    RequestValidation,
    SignatureCheckQuery,
    validate_params,
)
from connectivity_pipeline.scoring import score_database
from connectivity_pipeline.session import QuerySession

logger = structlog.get_logger(__name__)


class Endpoint:
    """Base class for query endpoints.

    Subclasses set name, help_text, model and required, and implement
    info, header and result.
    """

    name: str = ""
    help_text: str = ""
    model: type[BaseModel] = BaseModel
    required: tuple[str, ...] = ()

    def defaults(self, session: QuerySession | None) -> dict[str, Any]:
        """Parameter defaults taken from the session configuration."""
        if session is None:
            return {}
        return session.config.query.model_dump()

    def validate(
        self,
        params: Mapping[str, Any],
        session: QuerySession | None = None,
    ) -> RequestValidation:
        """Decide whether the request is well-formed.

        A "help" parameter always rejects the request with the help text.
        """
        if "help" in params:
            return RequestValidation(passed=False, messages=[self.help_text])
        validation, _ = validate_params(
            self.model, params, self.required, self.defaults(session)
        )
        return validation

    def parse(self, params: Mapping[str, Any], session: QuerySession | None = None):
        """Parsed parameters, raising InvalidRequestError when invalid."""
        if "help" in params:
            raise InvalidRequestError([self.help_text])
        validation, parsed = validate_params(
            self.model, params, self.required, self.defaults(session)
        )
        if not validation.passed:
            raise InvalidRequestError(validation.messages)
        return parsed

    def run(self, session: QuerySession, params: Mapping[str, Any]) -> dict[str, Any]:
        """Run the endpoint and build the response payload."""
        parsed = self.parse(params, session)
        logger.info("endpoint_run_start", endpoint=self.name, version=parsed.version)
        return {
            "info": self.info(parsed),
            "header": self.header(parsed),
            "data": self.result(session, parsed),
        }

    def info(self, params) -> str:
        raise NotImplementedError

    def header(self, params) -> str:
        raise NotImplementedError

    def result(self, session: QuerySession, params) -> Any:
        raise NotImplementedError


class AnnotatedPwidsEndpoint(Endpoint):
    """Annotation table of samples, optionally scored against a signature."""

    name = "annotatedplatewellids"
    help_text = """Returns a table with annotations about samples, optionally with Zhang score.

Input:

- query: signature for calculating Zhang scores (optional, no score is calculated if not provided)
- features: list of features to return (optional, all features are returned if not provided)
- pwids: list of pwid regular expressions to return annotations for (optional, some - see limit - pwids are returned)
- limit: number of pwids to return if none are selected explicitly (optional, default is 10)
- version: "v1" or "v2" (optional, default is v1)
"""
    model = AnnotationQuery

    def info(self, params: AnnotationQuery) -> str:
        return "Annotations for a list of samples"

    def header(self, params: AnnotationQuery) -> str:
        return "Selected features"

    def result(self, session: QuerySession, params: AnnotationQuery) -> list[dict[str, Any]]:
        signature_specified = is_specified(params.query.split())
        pwids_specified = is_specified(params.pwids)
        features = params.features if is_specified(params.features) else DEFAULT_FEATURES

        filtered = filter_by_pwids(session.database, params.pwids)

        if signature_specified:
            query = resolve_signature(params.query, session.genes, session.vector_length)
            scored = score_database(filtered, query, workers=session.workers)
        else:
            scored = [(0.0, row) for row in filtered]

        candidates = limit_rows(scored, params.limit, pwids_specified)
        return assemble_records(candidates, features)


class BinnedZhangEndpoint(Endpoint):
    """Distribution of Zhang scores over all samples, as histogram buckets."""

    name = "binnedZhang"
    help_text = """Returns the distribution of Zhang scores of a signature against all samples.

Input:

- query: signature for calculating Zhang scores (mandatory)
- bins_x: number of buckets (optional, default is 20)
- bins_y: number of buckets along the score axis; 0 or less gives a 1-D histogram (optional, default is 0)
- version: "v1" or "v2" (optional, default is v1)
"""
    model = HistogramQuery
    required = ("query",)

    def info(self, params: HistogramQuery) -> str:
        if params.bins_y > 0:
            return f"Zhang scores binned in {params.bins_x}x{params.bins_y} buckets"
        return f"Zhang scores binned in {params.bins_x} buckets"

    def header(self, params: HistogramQuery) -> str:
        if params.bins_y > 0:
            return "x_bin, y_bin, x_lower, x_upper, y_lower, y_upper, count"
        return "bin, lower, upper, count"

    def result(self, session: QuerySession, params: HistogramQuery) -> list[dict]:
        query = resolve_signature(params.query, session.genes, session.vector_length)
        scored = score_database(session.database, query, workers=session.workers)
        return assemble_histogram([score for score, _ in scored], params.bins_x, params.bins_y)


class CheckSignatureEndpoint(Endpoint):
    """How the genes of a signature resolve against the gene table."""

    name = "checkSignature"
    help_text = """Returns annotations about genes (known in the gene table, symbol).

Input:

- query: a gene signature where genes can be in any format symbol, ensembl, probeset, entrez (mandatory)
"""
    model = SignatureCheckQuery
    required = ("query",)

    def info(self, params: SignatureCheckQuery) -> str:
        return "Annotations about genes in the signature"

    def header(self, params: SignatureCheckQuery) -> str:
        return "query, inL1000, probesetid, symbol, dataType"

    def result(self, session: QuerySession, params: SignatureCheckQuery) -> list[dict]:
        return check_signature(params.query, session.genes)


annotated_pwids = AnnotatedPwidsEndpoint()
binned_zhang = BinnedZhangEndpoint()
check_signature_endpoint = CheckSignatureEndpoint()

ENDPOINTS: dict[str, Endpoint] = {
    endpoint.name: endpoint
    for endpoint in (annotated_pwids, binned_zhang, check_signature_endpoint)
}


def submit(
    endpoint: Endpoint | str,
    session: QuerySession,
    params: Mapping[str, Any],
) -> dict[str, Any]:
    """Validate a request and run it.

    Args:
        endpoint: Endpoint instance or its name
        session: Query session with the reference data
        params: Flat map of request parameters

    Returns:
        Response payload with info, header and data

    Raises:
        InvalidRequestError: If validation fails (the pipeline does not run)
        KeyError: If the endpoint name is unknown
    """
    if isinstance(endpoint, str):
        endpoint = ENDPOINTS[endpoint]

    validation = endpoint.validate(params, session)
    if not validation.passed:
        logger.warning(
            "request_rejected",
            endpoint=endpoint.name,
            reasons=validation.messages,
        )
        raise InvalidRequestError(validation.messages)

    return endpoint.run(session, params)
