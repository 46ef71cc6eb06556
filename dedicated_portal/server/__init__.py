"""HTTP servers of the dedicated portal backends."""

from .auth import JWKSProvider, JWTAuthMiddleware
from .clusters_app import create_clusters_app
from .customers_app import create_customers_app

__all__ = ["JWKSProvider", "JWTAuthMiddleware", "create_clusters_app", "create_customers_app"]
