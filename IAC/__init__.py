"""
Pulumi infrastructure-as-code for a containerised web application on AWS.

This package defines AWS infrastructure including:
- VPC with public and private subnets planned from a base CIDR block
- App Runner service running the application image from ECR
- RDS PostgreSQL reachable only from the App Runner VPC connector
- ECR repository with environment-specific lifecycle rules
- WAF web ACL and optional CloudFront distribution for the edge layer
- GitHub Actions OIDC role for CI/CD deployments
"""
