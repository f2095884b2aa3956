"""webhost-ops: provision a single web host with CloudWatch log shipping."""

__version__ = "1.0.0"
