"""bawharness — manual test harness for IBM BAW task and automation service APIs."""

__version__ = "0.1.0"
