"""apicache: uniform list/get access to Kubernetes resources with filtering, sorting and pagination."""

__version__ = "0.1.0"
