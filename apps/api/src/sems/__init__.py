"""SEMS API - Smart Exit Monitoring System backend."""
