"""Workflow components: one module per workflow, each with a ``get_*`` dependency factory."""
