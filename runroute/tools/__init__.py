"""Command line tools (``python -m runroute.tools.<name>``)."""
