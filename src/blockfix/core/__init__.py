"""Core: domain models, contracts and services. No HTTP, SQL or CLI here."""
