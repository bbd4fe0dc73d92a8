"""Study-program recommendation service."""
