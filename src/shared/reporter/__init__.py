"""
System reporting: centralized logging with verbosity filtering.
"""

from shared.reporter.system_reporter import SystemReporter

__all__ = ["SystemReporter"]
