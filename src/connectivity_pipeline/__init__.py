"""connectivity-pipeline: signature queries against a rank-ordered sample database."""

__version__ = "0.1.0"
