from coursehub.core.database.cassandra import (
    CassandraConnection,
    close_cassandra,
    open_cassandra,
)


__all__ = ["CassandraConnection", "close_cassandra", "open_cassandra"]
