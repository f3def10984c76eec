"""Configuration, security, auth and infrastructure clients."""
