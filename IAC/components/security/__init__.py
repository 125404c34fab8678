"""
Security components for CI/CD access.

Components:
- GitHubActionsRoleComponent: OIDC provider and deploy role for GitHub Actions
"""

from IAC.components.security.github_actions_role import (
    GitHubActionsRoleComponent,
    GitHubActionsRoleOutputs,
)

__all__ = [
    "GitHubActionsRoleComponent",
    "GitHubActionsRoleOutputs",
]
