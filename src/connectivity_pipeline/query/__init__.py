"""Signature queries: filtering, feature extraction, assembly and endpoints."""

from connectivity_pipeline.query.filters import (
    WILDCARD,
    filter_by_pwids,
    is_specified,
    limit_rows,
    pwid_matches,
)
from connectivity_pipeline.query.features import (
    DEFAULT_FEATURES,
    FEATURE_ALIASES,
    FEATURE_NOT_FOUND,
    FeatureKind,
    extract_features,
    resolve_feature,
    resolve_features,
)
from connectivity_pipeline.query.assembler import (
    assemble_histogram,
    assemble_records,
    sort_by_score,
)
from connectivity_pipeline.query.params import (
    AnnotationQuery,
    HistogramQuery,
    InvalidRequestError,
    RequestValidation,
    SignatureCheckQuery,
    validate_params,
)
from connectivity_pipeline.query.endpoints import (
    ENDPOINTS,
    Endpoint,
    annotated_pwids,
    binned_zhang,
    check_signature_endpoint,
    submit,
)

__all__ = [
    "WILDCARD",
    "filter_by_pwids",
    "is_specified",
    "limit_rows",
    "pwid_matches",
    "DEFAULT_FEATURES",
    "FEATURE_ALIASES",
    "FEATURE_NOT_FOUND",
    "FeatureKind",
    "extract_features",
    "resolve_feature",
    "resolve_features",
    "assemble_histogram",
    "assemble_records",
    "sort_by_score",
    "AnnotationQuery",
    "HistogramQuery",
    "InvalidRequestError",
    "RequestValidation",
    "SignatureCheckQuery",
    "validate_params",
    "ENDPOINTS",
    "Endpoint",
    "annotated_pwids",
    "binned_zhang",
    "check_signature_endpoint",
    "submit",
]
