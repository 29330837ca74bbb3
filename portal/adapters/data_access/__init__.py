"""Entity stores and the data-access contract they implement."""

from portal.adapters.data_access.base import AbstractDataAccess, BatchUpdate

__all__ = ["AbstractDataAccess", "BatchUpdate"]
