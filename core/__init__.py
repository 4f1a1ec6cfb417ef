"""Core module - transport-neutral mapping and classification.

This module contains the mapping configuration, the URL builder, the
response classifier, the error taxonomy and logging. None of it performs
network I/O.

Transports and the RestClient orchestrator belong in /connectors/.
"""

__version__ = "1.0.0"
