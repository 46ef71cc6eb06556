"""Command line entry points using Typer."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
import uvicorn
from rich.console import Console
from rich.markup import escape

from ..api import ClustersService, DemoCustomersService, SQLCustomersService
from ..config import (
    DEFAULT_HOST,
    DEFAULT_OPENAPI_PATH,
    DEFAULT_PORT,
    ClustersServerConfig,
    CustomersServerConfig,
    load_openapi_document,
)
from ..exceptions import ConfigurationError
from ..k8s import ClusterOperatorProvisioner, K8sClient
from ..model.provisioning import ProvisionerSettings
from ..server import create_clusters_app, create_customers_app
from ..utils.logger import get_logger, set_log_level

clusters_cli = typer.Typer(
    name="clusters-service",
    help="Clusters service of the dedicated portal",
    add_completion=False,
)
customers_cli = typer.Typer(
    name="customers-service",
    help="Customers service of the dedicated portal",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _fail(message: str, error: Exception) -> NoReturn:
    """Log a fatal startup error and exit."""
    logger.error(f"{message}: {error}")
    console.print(f"[red]{message}:[/red] {escape(str(error))}", soft_wrap=True)
    raise typer.Exit(code=1)


@clusters_cli.callback()
def clusters_main():
    """Provision OpenShift clusters through the Cluster-Operator."""


@clusters_cli.command("serve")
def serve_clusters(
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        help="Path to a Kubernetes client configuration file. Only required when running "
        "outside of a cluster.",
    ),
    master: Optional[str] = typer.Option(
        None,
        "--master",
        help="The address of the Kubernetes API server. Overrides any value in the Kubernetes "
        "configuration file.",
    ),
    host: str = typer.Option(DEFAULT_HOST, "--host", help="The IP address or host name of the server."),
    port: int = typer.Option(DEFAULT_PORT, "--port", help="The port number of the server."),
    db_url: Optional[str] = typer.Option(
        None,
        "--db-url",
        help="The database connection url. Defaults to a local PostgreSQL database described by "
        "POSTGRESQL_USER, POSTGRESQL_PASSWORD and POSTGRESQL_DATABASE.",
    ),
    provisioner_config: Optional[Path] = typer.Option(
        None, "--provisioner-config", help="YAML file overriding the provisioning settings."
    ),
    log_level: str = typer.Option("info", "--log-level", help="Logging level."),
):
    """Serve the clusters service."""
    try:
        set_log_level(log_level)
    except ValueError as e:
        _fail("Invalid --log-level", e)

    config = ClustersServerConfig(
        host=host,
        port=port,
        kubeconfig=kubeconfig,
        master=master,
        db_url=db_url,
        provisioner_config=provisioner_config,
    )

    try:
        config.validate_for_serving()
        settings = ProvisionerSettings.from_yaml(config.provisioner_config)
        k8s_client = K8sClient.from_kubeconfig(config.kubeconfig, config.master)
    except ConfigurationError as e:
        _fail("Can't configure the cluster provisioner", e)

    provisioner = ClusterOperatorProvisioner(k8s_client, settings)
    service = ClustersService.from_url(config.database_url(), provisioner)
    app = create_clusters_app(service)

    console.print(f"Listening on [cyan]{config.host}:{config.port}[/cyan]")
    uvicorn.run(app, host=config.host, port=config.port, log_level=log_level.lower())


@customers_cli.callback()
def customers_main():
    """CRUD over the customers of the dedicated portal."""


@customers_cli.command("serve")
def serve_customers(
    host: str = typer.Option(DEFAULT_HOST, "--host", help="The IP address or host name of the server."),
    port: int = typer.Option(DEFAULT_PORT, "--port", help="The port number of the server."),
    db_url: Optional[str] = typer.Option(None, "--db-url", help="The database connection url."),
    jwk_certs_url: Optional[str] = typer.Option(
        None, "--jwk-certs-url", help="The url endpoint for the JWK certs."
    ),
    demo_mode: bool = typer.Option(
        False, "--demo-mode", help="Run in demo mode (no token needed, return demo data)."
    ),
    no_https: bool = typer.Option(False, "--no-https", help="Serve without using tls."),
    https_cert_path: Optional[Path] = typer.Option(
        None, "--https-cert-path", help="The path to the tls.crt file."
    ),
    https_key_path: Optional[Path] = typer.Option(
        None, "--https-key-path", help="The path to the tls.key file."
    ),
    openapi_path: Path = typer.Option(
        DEFAULT_OPENAPI_PATH, "--openapi-path", help="OpenAPI document served at /openapi."
    ),
    log_level: str = typer.Option("info", "--log-level", help="Logging level."),
):
    """Serve the customers service."""
    try:
        set_log_level(log_level)
    except ValueError as e:
        _fail("Invalid --log-level", e)

    config = CustomersServerConfig(
        host=host,
        port=port,
        db_url=db_url,
        jwk_certs_url=jwk_certs_url,
        demo_mode=demo_mode,
        no_https=no_https,
        https_cert_path=https_cert_path,
        https_key_path=https_key_path,
        openapi_path=openapi_path,
    )

    try:
        config.validate_for_serving()
        openapi_document = load_openapi_document(config.openapi_path)
    except ConfigurationError as e:
        _fail("Can't start the customers service", e)

    if config.demo_mode:
        logger.info("Using the in-memory demo customers")
        service = DemoCustomersService()
    else:
        logger.info("Using the SQL customers store")
        service = SQLCustomersService.from_url(config.db_url)

    app = create_customers_app(config, service, openapi_document)

    ssl_options = {}
    if not config.no_https:
        ssl_options = {
            "ssl_certfile": str(config.https_cert_path),
            "ssl_keyfile": str(config.https_key_path),
        }

    logger.info(f"Starting customers-service server at {config.address}.")
    uvicorn.run(app, host=config.host, port=config.port, log_level=log_level.lower(), **ssl_options)
