from insightdesk.models.data_source import DataSource, DataSourceStatus
from insightdesk.models.metric_sample import MetricSample
from insightdesk.models.insight import (
    Insight,
    InsightCategory,
    InsightImpact,
    InsightSeverity,
    InsightType,
)
from insightdesk.models.report import Report
from insightdesk.models.chat_conversation import ChatConversation
from insightdesk.models.llm_log import LlmLog

__all__ = [
    "DataSource",
    "DataSourceStatus",
    "MetricSample",
    "Insight",
    "InsightCategory",
    "InsightImpact",
    "InsightSeverity",
    "InsightType",
    "Report",
    "ChatConversation",
    "LlmLog",
]
