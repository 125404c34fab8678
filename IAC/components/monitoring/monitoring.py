"""
Monitoring Component for Alarms, Dashboard and Cost Control.

Alert Flow:
  CloudWatch alarms ─┐
                     ├→ SNS alarm topic → (optional) email subscription
  Cost budget ───────┘

Alarms:
- App Runner: average response time, 5xx count, p95 response time and
  5xx rate as a percentage of requests (metric math).
- RDS: CPU utilization, free storage space, connection count.
Thresholds come from ALARM_THRESHOLDS and are tighter in production.

Cost:
- Monthly COST budget filtered on the Environment tag, notifying at 80%
  actual and 100% forecasted spend (enable_cost_budget).
- Optional Cost Explorer anomaly monitor per AWS service
  (enable_cost_anomaly); the email subscription needs alert_email.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.base import EnvironmentConfig
from IAC.configs.constants import ALARM_THRESHOLDS, BUDGET_NOTIFICATIONS, NAME_LIMITS
from IAC.utils.naming import ResourceNamer
from IAC.utils.tags import create_tags

ALARM_PERIOD_SECONDS = 300
ANOMALY_IMPACT_USD = "100"

# Billing metrics are only published in us-east-1
BILLING_REGION = "us-east-1"


@dataclass
class MonitoringOutputs:
    """Output values from Monitoring component."""
    alarm_topic_arn: pulumi.Output[str]
    dashboard_name: pulumi.Output[str]
    dashboard_url: pulumi.Output[str]
    budget_name: pulumi.Output[str] | None


def _metric_widget(title: str, metrics: list, region: str, x: int, y: int, **properties) -> dict:
    return {
        "type": "metric",
        "x": x,
        "y": y,
        "width": 12,
        "height": 6,
        "properties": {
            "metrics": metrics,
            "view": "timeSeries",
            "stacked": False,
            "region": region,
            "title": title,
            "period": ALARM_PERIOD_SECONDS,
            "stat": "Average",
            **properties,
        },
    }


def build_dashboard_body(
    service_name: str | None,
    db_instance_identifier: str | None,
    region: str,
) -> dict:
    """
    CloudWatch dashboard with App Runner, RDS and billing widgets.

    Service and database widgets are left out when their name is missing.
    """
    widgets = []

    if service_name:
        widgets.append(_metric_widget(
            "App Runner Metrics",
            [
                ["AWS/AppRunner", "RequestCount", "ServiceName", service_name],
                [".", "ResponseTime", ".", "."],
                [".", "ActiveInstances", ".", "."],
                [".", "2xxStatusResponses", ".", "."],
                [".", "4xxStatusResponses", ".", "."],
                [".", "5xxStatusResponses", ".", "."],
            ],
            region,
            x=0,
            y=0,
        ))

    if db_instance_identifier:
        widgets.append(_metric_widget(
            "RDS PostgreSQL Metrics",
            [
                ["AWS/RDS", "CPUUtilization", "DBInstanceIdentifier", db_instance_identifier],
                [".", "DatabaseConnections", ".", "."],
                [".", "FreeStorageSpace", ".", "."],
                [".", "ReadLatency", ".", "."],
                [".", "WriteLatency", ".", "."],
            ],
            region,
            x=0,
            y=6,
        ))

    widgets.append(_metric_widget(
        "Estimated Charges (USD)",
        [["AWS/Billing", "EstimatedCharges", "Currency", "USD"]],
        BILLING_REGION,
        x=12,
        y=0,
        period=86400,
        stat="Maximum",
    ))

    return {"widgets": widgets}


def build_alarm_topic_policy(topic_arn: str, account_id: str) -> dict:
    """Allow CloudWatch alarms and AWS Budgets in this account to publish."""
    return {
        "Version": "2012-10-17",
        "Statement": [{
            "Sid": "AllowAlertPublishers",
            "Effect": "Allow",
            "Principal": {
                "Service": ["cloudwatch.amazonaws.com", "budgets.amazonaws.com"],
            },
            "Action": "SNS:Publish",
            "Resource": topic_arn,
            "Condition": {"StringEquals": {"aws:SourceAccount": account_id}},
        }],
    }


class MonitoringComponent(pulumi.ComponentResource):
    """
    Alarm topic, CloudWatch alarms and dashboard, and cost monitoring.
    """

    def __init__(
        self,
        name: str,
        config: EnvironmentConfig,
        namer: ResourceNamer,
        account_id: str,
        region: str,
        service_name: pulumi.Input[str] | None = None,
        db_instance_identifier: pulumi.Input[str] | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:monitoring:Monitoring", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        self.environment = config.environment
        self._name = name
        self._namer = namer
        self._region = region
        self.thresholds = ALARM_THRESHOLDS[config.environment]

        # SNS alarm topic
        self.alarm_topic = aws.sns.Topic(
            f"{name}-alerts",
            name=namer.aws_name("alerts", NAME_LIMITS["sns_topic"]),
            display_name=f"{config.app_name} Alerts ({config.environment})",
            tags=create_tags(self.environment, f"{name}-alerts"),
            opts=child_opts,
        )

        aws.sns.TopicPolicy(
            f"{name}-alerts-policy",
            arn=self.alarm_topic.arn,
            policy=self.alarm_topic.arn.apply(
                lambda arn: json.dumps(build_alarm_topic_policy(arn, account_id))
            ),
            opts=child_opts,
        )

        self.email_subscription = None
        if config.alert_email:
            self.email_subscription = aws.sns.TopicSubscription(
                f"{name}-email-alert",
                topic=self.alarm_topic.arn,
                protocol="email",
                endpoint=config.alert_email,
                opts=child_opts,
            )
        elif config.is_production:
            pulumi.log.warn(
                "No alertEmail configured: production alarms only reach the SNS topic",
                resource=self,
            )

        # Dashboard
        self.dashboard = aws.cloudwatch.Dashboard(
            f"{name}-dashboard",
            dashboard_name=namer.aws_name("dashboard", NAME_LIMITS["cloudwatch_dashboard"]),
            dashboard_body=pulumi.Output.all(
                pulumi.Output.from_input(service_name),
                pulumi.Output.from_input(db_instance_identifier),
            ).apply(lambda args: json.dumps(build_dashboard_body(args[0], args[1], region))),
            opts=child_opts,
        )

        self.alarms: dict[str, aws.cloudwatch.MetricAlarm] = {}
        if service_name is not None:
            self._create_app_runner_alarms(service_name, child_opts)
        if db_instance_identifier is not None:
            self._create_database_alarms(db_instance_identifier, child_opts)

        pulumi.log.info(f"Created {len(self.alarms)} CloudWatch alarms", resource=self)

        # Cost monitoring
        self.budget = None
        if config.enable_cost_budget:
            self.budget = self._create_budget(config, child_opts)

        self.anomaly_monitor = None
        self.anomaly_subscription = None
        if config.enable_cost_anomaly:
            self._create_cost_anomaly(config, child_opts)

        self.register_outputs({
            "alarm_topic_arn": self.alarm_topic.arn,
            "dashboard_name": self.dashboard.dashboard_name,
            "dashboard_url": self.dashboard_url,
        })

    @property
    def dashboard_url(self) -> pulumi.Output[str]:
        region = self._region
        return self.dashboard.dashboard_name.apply(
            lambda dashboard: (
                f"https://{region}.console.aws.amazon.com/cloudwatch/home"
                f"?region={region}#dashboards:name={dashboard}"
            )
        )

    def _alarm(
        self,
        key: str,
        description: str,
        opts: pulumi.ResourceOptions,
        **alarm_args,
    ) -> aws.cloudwatch.MetricAlarm:
        """Create an alarm publishing to the alarm topic and register it under key."""
        alarm = aws.cloudwatch.MetricAlarm(
            f"{self._name}-{key}",
            name=self._namer.aws_name(key, NAME_LIMITS["cloudwatch_alarm"]),
            alarm_description=description,
            alarm_actions=[self.alarm_topic.arn],
            tags=create_tags(self.environment, f"{self._name}-{key}"),
            opts=opts,
            **alarm_args,
        )
        self.alarms[key] = alarm
        return alarm

    def _create_app_runner_alarms(
        self,
        service_name: pulumi.Input[str],
        opts: pulumi.ResourceOptions,
    ) -> None:
        dimensions = {"ServiceName": service_name}

        self._alarm(
            "apprunner-high-response-time",
            "App Runner service response time is high",
            opts,
            namespace="AWS/AppRunner",
            metric_name="ResponseTime",
            statistic="Average",
            period=ALARM_PERIOD_SECONDS,
            evaluation_periods=2,
            threshold=self.thresholds["response_time_ms"],
            comparison_operator="GreaterThanThreshold",
            dimensions=dimensions,
        )

        self._alarm(
            "apprunner-high-error-rate",
            "App Runner service 5xx responses are high",
            opts,
            namespace="AWS/AppRunner",
            metric_name="5xxStatusResponses",
            statistic="Sum",
            period=ALARM_PERIOD_SECONDS,
            evaluation_periods=2,
            threshold=self.thresholds["error_count"],
            comparison_operator="GreaterThanThreshold",
            dimensions=dimensions,
        )

        self._alarm(
            "apprunner-p95-response",
            "App Runner p95 response time SLO",
            opts,
            namespace="AWS/AppRunner",
            metric_name="ResponseTime",
            extended_statistic="p95",
            period=ALARM_PERIOD_SECONDS,
            evaluation_periods=2,
            threshold=self.thresholds["response_time_ms"],
            comparison_operator="GreaterThanThreshold",
            dimensions=dimensions,
        )

        def app_runner_metric(query_id: str, metric_name: str):
            return aws.cloudwatch.MetricAlarmMetricQueryArgs(
                id=query_id,
                metric=aws.cloudwatch.MetricAlarmMetricQueryMetricArgs(
                    namespace="AWS/AppRunner",
                    metric_name=metric_name,
                    dimensions=dimensions,
                    period=ALARM_PERIOD_SECONDS,
                    stat="Sum",
                ),
                return_data=False,
            )

        self._alarm(
            "apprunner-error-rate-pct",
            "App Runner 5xx error rate exceeds SLO",
            opts,
            evaluation_periods=2,
            threshold=self.thresholds["error_rate_pct"],
            comparison_operator="GreaterThanThreshold",
            treat_missing_data="notBreaching",
            metric_queries=[
                app_runner_metric("m5xx", "5xxStatusResponses"),
                app_runner_metric("mreq", "RequestCount"),
                aws.cloudwatch.MetricAlarmMetricQueryArgs(
                    id="e1",
                    expression="100 * m5xx / mreq",
                    label="Error rate %",
                    return_data=True,
                ),
            ],
        )

    def _create_database_alarms(
        self,
        db_instance_identifier: pulumi.Input[str],
        opts: pulumi.ResourceOptions,
    ) -> None:
        dimensions = {"DBInstanceIdentifier": db_instance_identifier}

        self._alarm(
            "db-high-cpu",
            "Database CPU utilization is high",
            opts,
            namespace="AWS/RDS",
            metric_name="CPUUtilization",
            statistic="Average",
            period=ALARM_PERIOD_SECONDS,
            evaluation_periods=2,
            threshold=self.thresholds["db_cpu_pct"],
            comparison_operator="GreaterThanThreshold",
            dimensions=dimensions,
        )

        self._alarm(
            "db-low-storage",
            "Database free storage space is low",
            opts,
            namespace="AWS/RDS",
            metric_name="FreeStorageSpace",
            statistic="Average",
            period=ALARM_PERIOD_SECONDS,
            evaluation_periods=1,
            threshold=self.thresholds["db_free_storage_bytes"],
            comparison_operator="LessThanThreshold",
            dimensions=dimensions,
        )

        self._alarm(
            "db-high-connections",
            "Database connection count is high",
            opts,
            namespace="AWS/RDS",
            metric_name="DatabaseConnections",
            statistic="Average",
            period=ALARM_PERIOD_SECONDS,
            evaluation_periods=2,
            threshold=self.thresholds["db_connections"],
            comparison_operator="GreaterThanThreshold",
            dimensions=dimensions,
        )

    def _create_budget(
        self,
        config: EnvironmentConfig,
        opts: pulumi.ResourceOptions,
    ) -> aws.budgets.Budget:
        """Monthly COST budget for resources tagged with this environment."""
        emails = [config.alert_email] if config.alert_email else []

        return aws.budgets.Budget(
            f"{self._name}-cost-budget",
            name=self._namer.aws_name("monthly-budget", NAME_LIMITS["budget"]),
            budget_type="COST",
            limit_amount=str(config.monthly_budget_usd),
            limit_unit="USD",
            time_unit="MONTHLY",
            cost_filters=[
                aws.budgets.BudgetCostFilterArgs(
                    name="TagKeyValue",
                    values=[f"user:Environment${config.environment}"],
                ),
            ],
            notifications=[
                aws.budgets.BudgetNotificationArgs(
                    comparison_operator="GREATER_THAN",
                    threshold=threshold,
                    threshold_type="PERCENTAGE",
                    notification_type=notification_type,
                    subscriber_email_addresses=emails,
                    subscriber_sns_topic_arns=[self.alarm_topic.arn],
                )
                for threshold, notification_type in BUDGET_NOTIFICATIONS
            ],
            opts=opts,
        )

    def _create_cost_anomaly(
        self,
        config: EnvironmentConfig,
        opts: pulumi.ResourceOptions,
    ) -> None:
        self.anomaly_monitor = aws.costexplorer.AnomalyMonitor(
            f"{self._name}-cost-anomaly",
            name=self._namer.aws_name("cost-anomaly", NAME_LIMITS["cost_anomaly"]),
            monitor_type="DIMENSIONAL",
            monitor_dimension="SERVICE",
            tags=create_tags(self.environment, f"{self._name}-cost-anomaly"),
            opts=opts,
        )

        if not config.alert_email:
            pulumi.log.info(
                "Cost anomaly monitor has no subscriber without alertEmail",
                resource=self,
            )
            return

        self.anomaly_subscription = aws.costexplorer.AnomalySubscription(
            f"{self._name}-anomaly-subscription",
            name=self._namer.aws_name("anomaly-subscription", NAME_LIMITS["cost_anomaly"]),
            frequency="DAILY",
            monitor_arn_lists=[self.anomaly_monitor.arn],
            subscribers=[
                aws.costexplorer.AnomalySubscriptionSubscriberArgs(
                    type="EMAIL",
                    address=config.alert_email,
                ),
            ],
            threshold_expression=aws.costexplorer.AnomalySubscriptionThresholdExpressionArgs(
                dimension=aws.costexplorer.AnomalySubscriptionThresholdExpressionDimensionArgs(
                    key="ANOMALY_TOTAL_IMPACT_ABSOLUTE",
                    match_options=["GREATER_THAN_OR_EQUAL"],
                    values=[ANOMALY_IMPACT_USD],
                ),
            ),
            tags=create_tags(self.environment, f"{self._name}-anomaly-subscription"),
            opts=opts,
        )

    def get_outputs(self) -> MonitoringOutputs:
        """Get Monitoring output values."""
        return MonitoringOutputs(
            alarm_topic_arn=self.alarm_topic.arn,
            dashboard_name=self.dashboard.dashboard_name,
            dashboard_url=self.dashboard_url,
            budget_name=self.budget.name if self.budget else None,
        )
