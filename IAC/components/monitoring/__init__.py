"""
Monitoring components.

Components:
- MonitoringComponent: Alarm topic, CloudWatch alarms, dashboard, cost budget
"""

from IAC.components.monitoring.monitoring import MonitoringComponent, MonitoringOutputs

__all__ = [
    "MonitoringComponent",
    "MonitoringOutputs",
]
