"""Consistency levels for statements whose reads must see the latest write.

Keyspaces outside development replicate to several nodes, and the driver's
default LOCAL_ONE may answer from a replica a lightweight transaction has
not reached yet. Reads that feed a decision (rating recomputation,
enrollment gates) and the writes they race with run at LOCAL_QUORUM;
conditional writes run their Paxos round at LOCAL_SERIAL.
"""

from typing import TypeVar

from cassandra import ConsistencyLevel


S = TypeVar("S")

QUORUM = ConsistencyLevel.LOCAL_QUORUM
SERIAL = ConsistencyLevel.LOCAL_SERIAL


def quorum(statement: S) -> S:
    statement.consistency_level = QUORUM
    return statement


def conditional(statement: S) -> S:
    """For ``IF ...`` statements: quorum commit, local Paxos round."""
    statement.consistency_level = QUORUM
    statement.serial_consistency_level = SERIAL
    return statement
