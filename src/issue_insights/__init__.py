"""Issue Insights: project analytics dashboards for Jira Cloud."""

__version__ = "0.1.0"
