"""musing-cli: live status dashboard for a local multi-service dev stack."""

__version__ = "0.4.0"
