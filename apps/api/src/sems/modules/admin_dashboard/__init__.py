"""Admin dashboard: the log of exit requests processed by administrators."""
