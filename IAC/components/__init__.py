"""
Pulumi component resources for the application infrastructure.

Each submodule provides reusable ComponentResource classes:
- networking: VPC, subnets, NAT gateway, security groups
- compute: App Runner service
- storage: RDS PostgreSQL, ECR repository, AWS Backup
- monitoring: CloudWatch alarms and dashboard, cost budget
- edge: WAF, CloudFront
- security: GitHub Actions OIDC role
"""
