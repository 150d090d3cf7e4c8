"""Client-side state layer.

This package holds everything the management views share in memory:
the notification queue, list reconciliation, the per-list
fetch/mutate/refresh cycle and the typed event bus.
"""
