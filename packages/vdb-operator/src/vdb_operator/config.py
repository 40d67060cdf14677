"""Environment-based configuration for the operator process."""

from pydantic_settings import BaseSettings

# Name of the container running the database server in every member.
SERVER_CONTAINER = "server"


class Settings(BaseSettings):
    """Operator configuration.

    All settings can be overridden via environment variables with
    VDB_OPERATOR_ prefix. For example:
        VDB_OPERATOR_RUNNER=docker
        VDB_OPERATOR_RESYNC_INTERVAL_SECONDS=60
    """

    # Command runner backend: "kubernetes" or "docker"
    runner: str = "kubernetes"

    # Kubernetes connection
    kubeconfig: str | None = None
    in_cluster: bool = False
    namespace: str = "default"

    # Container executing admintools and the agent
    server_container: str = SERVER_CONTAINER

    # Resync loop
    resync_interval_seconds: float = 30.0
    requeue_delay_seconds: float = 5.0

    # Communal credentials for the docker backend (no Secret objects there)
    communal_access_key: str = ""
    communal_secret_key: str = ""

    log_level: str = "INFO"

    model_config = {"env_prefix": "VDB_OPERATOR_"}
