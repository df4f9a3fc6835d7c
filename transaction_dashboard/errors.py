# transaction_dashboard/errors.py


class DashboardError(Exception):
    """Base class for every failure the dashboard reports."""


class UpstreamFetchError(DashboardError):
    """The seed source was unreachable or answered with an unusable payload."""


class StoreError(DashboardError):
    pass


class StoreWriteError(StoreError):
    pass


class StoreReadError(StoreError):
    pass


class InvalidQueryError(DashboardError, ValueError):
    """A request parameter could not be parsed."""


class FetchError(DashboardError):
    """A dashboard call to the HTTP API failed."""
