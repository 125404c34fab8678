"""
Compute components for the application service.

Components:
- AppRunnerComponent: App Runner service with ECR image source
"""

from IAC.components.compute.app_runner import AppRunnerComponent, AppRunnerOutputs

__all__ = [
    "AppRunnerComponent",
    "AppRunnerOutputs",
]
