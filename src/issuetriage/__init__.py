"""Human-in-the-loop GitHub issue triage sessions."""

__version__ = "0.1.0"
