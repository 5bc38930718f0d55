import enum
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.sql import func

from insightdesk.database import Base


class InsightType(str, enum.Enum):
    ANOMALY = "anomaly"
    TREND = "trend"
    FORECAST = "forecast"
    BENCHMARK = "benchmark"
    RECOMMENDATION = "recommendation"


class InsightSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class InsightCategory(str, enum.Enum):
    REVENUE = "revenue"
    TRAFFIC = "traffic"
    CONVERSION = "conversion"
    USER = "user"
    MARKETING = "marketing"


class InsightImpact(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


def _enum_column(enum_cls, name: str, default):
    return Column(
        Enum(
            enum_cls,
            values_callable=lambda cls: [e.value for e in cls],
            name=name,
        ),
        nullable=False,
        default=default,
    )


class Insight(Base):
    __tablename__ = "insights"
    __table_args__ = (
        CheckConstraint(
            "confidence >= 0 AND confidence <= 100", name="ck_insights_confidence_range"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    userId = Column(String, nullable=False, index=True)

    type = _enum_column(InsightType, "insights_type_enum", InsightType.TREND)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    severity = _enum_column(
        InsightSeverity, "insights_severity_enum", InsightSeverity.LOW
    )
    category = _enum_column(
        InsightCategory, "insights_category_enum", InsightCategory.REVENUE
    )
    impact = _enum_column(InsightImpact, "insights_impact_enum", InsightImpact.NEUTRAL)
    confidence = Column(Integer, nullable=False, default=0)  # 0-100
    dataSource = Column(String, nullable=True)  # display label, e.g. "Stripe Analytics"
    isRead = Column(Boolean, nullable=False, default=False)

    createdAt = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
