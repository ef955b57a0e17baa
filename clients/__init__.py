# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_valkey_url,
    get_jwt_secret,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
