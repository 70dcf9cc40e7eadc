"""
plumbline: local execution engine for data-quality validation jobs.

Runs one validation task end to end by dispatching Source, Transform and
Sink plugins around a shared set of database connections.
"""

__version__ = "0.1.0"
