"""Infrastructure layer — storage, coordination and observability for etudes.

Modules:
    artifact_store  File and in-memory artifact stores with atomic publish.
    orchestrator    Single-flight generation per artifact key.
    metrics         Prometheus metrics registry.
    log_config      Root logger setup for the server process.
"""
