"""Core web host provisioning modules."""
