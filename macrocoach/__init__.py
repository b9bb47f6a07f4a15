"""Match history API backed by a PostgreSQL primary and read replicas."""

__version__ = "0.1.0"
