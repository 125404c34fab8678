"""
Storage components for RDS, ECR and AWS Backup.

Components:
- RdsPostgresComponent: RDS PostgreSQL database
- EcrRepositoryComponent: Container image repository
- BackupComponent: AWS Backup vault and daily plan (production)
"""

from IAC.components.storage.rds_postgres import RdsPostgresComponent, RdsOutputs
from IAC.components.storage.ecr_repository import EcrRepositoryComponent, EcrRepositoryOutputs
from IAC.components.storage.backup import BackupComponent, BackupOutputs

__all__ = [
    "RdsPostgresComponent",
    "RdsOutputs",
    "EcrRepositoryComponent",
    "EcrRepositoryOutputs",
    "BackupComponent",
    "BackupOutputs",
]
