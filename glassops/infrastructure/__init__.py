"""Host-facing collaborators: filesystem, processes, logging."""
