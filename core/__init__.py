"""Core module - cross-cutting services for the job worker.

Contains the job execution ledger and observability (logging, metrics).
Engine-specific code belongs in /connectors/.
"""

__version__ = "1.0.0"
