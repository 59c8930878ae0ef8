"""State layer.

This package holds the bounded in-memory state the poller reconciles
fetch results into, and the only code allowed to turn that state into
a published snapshot.
"""
