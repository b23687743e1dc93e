"""Core services: selector resolution, fetching, diffing and remediation."""
