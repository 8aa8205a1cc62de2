"""Cassandra connection and schema bootstrap.

The cluster comes from cassandra-asyncio-driver, whose sessions add an
awaitable ``aexecute()`` next to the blocking driver API. Connecting and
preparing statements stay synchronous; every query the repositories run
at request time goes through ``aexecute()``.
"""

from typing import TYPE_CHECKING

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from coursehub.auth.models import AUTH_TABLES_CQL
from coursehub.categories.models import CATEGORIES_TABLES_CQL
from coursehub.config.settings import get_settings
from coursehub.courses.models import COURSES_TABLES_CQL
from coursehub.progress.models import PROGRESS_TABLES_CQL
from coursehub.reviews.models import REVIEWS_TABLES_CQL


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from coursehub.config.settings import Settings

logger = structlog.get_logger(__name__)

SCHEMA: tuple[tuple[str, list[str]], ...] = (
    ("auth", AUTH_TABLES_CQL),
    ("categories", CATEGORIES_TABLES_CQL),
    ("courses", COURSES_TABLES_CQL),
    ("progress", PROGRESS_TABLES_CQL),
    ("reviews", REVIEWS_TABLES_CQL),
)


def _build_cluster(settings: "Settings") -> Cluster:
    credentials = None
    if settings.cassandra_username and settings.cassandra_password:
        credentials = PlainTextAuthProvider(
            username=settings.cassandra_username,
            password=settings.cassandra_password,
        )
    return Cluster(
        contact_points=settings.cassandra_hosts,
        port=settings.cassandra_port,
        auth_provider=credentials,
        protocol_version=settings.cassandra_protocol_version,
        connect_timeout=settings.cassandra_connect_timeout,
        load_balancing_policy=TokenAwarePolicy(
            DCAwareRoundRobinPolicy(local_dc=settings.cassandra_datacenter)
        ),
    )


def replication_clause(settings: "Settings") -> str:
    """Keyspace replication: one datacenter-aware strategy outside development."""
    factor = settings.cassandra_replication_factor
    if settings.is_development or settings.environment == "testing":
        return f"{{'class': 'SimpleStrategy', 'replication_factor': {factor}}}"
    return (
        f"{{'class': 'NetworkTopologyStrategy', "
        f"'{settings.cassandra_datacenter}': {factor}}}"
    )


class CassandraConnection:
    """Process-wide cluster and session."""

    _cluster: Cluster | None = None
    _session: "Session | None" = None

    @classmethod
    def connect(cls) -> "Session":
        """Open the session, reusing an existing one.

        Raises:
            ConnectionError: If no contact point answers
        """
        if cls._session is not None:
            return cls._session

        settings = get_settings()
        cls._cluster = _build_cluster(settings)
        try:
            cls._session = cls._cluster.connect()
        except Exception as e:
            logger.error(
                "cassandra_connection_failed",
                hosts=settings.cassandra_hosts,
                error=str(e),
            )
            cls._cluster.shutdown()
            cls._cluster = None
            msg = f"Cannot reach Cassandra at {settings.cassandra_hosts}: {e}"
            raise ConnectionError(msg) from e

        logger.info(
            "cassandra_connected",
            hosts=settings.cassandra_hosts,
            port=settings.cassandra_port,
        )
        return cls._session

    @classmethod
    def close(cls) -> None:
        session, cluster = cls._session, cls._cluster
        cls._session = cls._cluster = None
        if session is not None:
            session.shutdown()
        if cluster is not None:
            cluster.shutdown()
            logger.info("cassandra_closed")

    @classmethod
    def is_connected(cls) -> bool:
        return cls._session is not None and not cls._session.is_shutdown


async def create_schema(session: "Session", settings: "Settings") -> None:
    """Create the keyspace and every table; existing objects are left alone."""
    keyspace = settings.cassandra_keyspace
    await session.aexecute(
        f"CREATE KEYSPACE IF NOT EXISTS {keyspace} "
        f"WITH replication = {replication_clause(settings)}"
    )
    session.set_keyspace(keyspace)

    for module, statements in SCHEMA:
        for cql in statements:
            await session.aexecute(cql.format(keyspace=keyspace))
        logger.debug("schema_ready", module=module, keyspace=keyspace)


async def open_cassandra() -> "Session":
    """Connect and make sure the schema exists."""
    settings = get_settings()
    session = CassandraConnection.connect()
    await create_schema(session, settings)
    logger.info("cassandra_initialized", keyspace=settings.cassandra_keyspace)
    return session


async def close_cassandra() -> None:
    CassandraConnection.close()
