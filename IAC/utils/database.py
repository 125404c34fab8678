"""
PostgreSQL connection string helpers.

The connection string embeds the master password, so the Pulumi output is
always marked secret.
"""

import pulumi


def format_connection_string(
    username: str,
    password: str,
    host: str,
    port: int,
    database: str,
    ssl_mode: str | None = None,
) -> str:
    """Format a postgresql:// URL, appending sslmode when given."""
    url = f"postgresql://{username}:{password}@{host}:{port}/{database}"
    if not ssl_mode:
        return url
    return f"{url}?sslmode={ssl_mode}"


def build_database_connection_string(
    username: pulumi.Input[str],
    password: pulumi.Input[str],
    host: pulumi.Input[str],
    port: pulumi.Input[int],
    database: pulumi.Input[str],
    ssl_mode: pulumi.Input[str] | None = None,
) -> pulumi.Output[str]:
    """
    Build a secret PostgreSQL connection string from resource outputs.

    Args:
        username: Master username
        password: Master password (secret)
        host: Instance address (without port)
        port: Instance port
        database: Database name
        ssl_mode: Optional sslmode query parameter

    Returns:
        Secret output holding the connection URL
    """
    return pulumi.Output.secret(
        pulumi.Output.all(username, password, host, port, database, ssl_mode).apply(
            lambda args: format_connection_string(*args)
        )
    )
