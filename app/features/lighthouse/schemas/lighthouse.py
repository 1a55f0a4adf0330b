from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

NOT_AVAILABLE = "N/A"


class AnalyzeIn(BaseModel):
    url: str
    options: Dict[str, Any] = Field(default_factory=dict)


class AnalyzeOut(BaseModel):
    id: str
    status: Literal["pending"] = "pending"
    message: str = "Lighthouse test in progress..."


class HealthOut(BaseModel):
    status: str = "OK"
    timestamp: datetime
    service: str


class CategorySummary(BaseModel):
    name: str
    score: Optional[int] = None
    label: Optional[Literal["good", "medium", "poor"]] = None

    def render(self) -> str:
        if self.score is None:
            return f"{self.name}: {NOT_AVAILABLE}"
        return f"[{self.label}] {self.name}: {self.score}/100"


class ReportSummary(BaseModel):
    url: str
    categories: List[CategorySummary] = Field(default_factory=list)
    first_contentful_paint: str = NOT_AVAILABLE
    largest_contentful_paint: str = NOT_AVAILABLE
    total_byte_weight: str = NOT_AVAILABLE

    def category(self, name: str) -> Optional[CategorySummary]:
        return next((c for c in self.categories if c.name == name), None)

    def lines(self) -> List[str]:
        return [
            f"Tested URL: {self.url}",
            "Scores:",
            *(f"  {c.render()}" for c in self.categories),
            "Performance metrics:",
            f"  First Contentful Paint: {self.first_contentful_paint}",
            f"  Largest Contentful Paint: {self.largest_contentful_paint}",
            f"  Total size: {self.total_byte_weight}",
        ]


class DeliveryEnvelope(BaseModel):
    """Payload POSTed to the collector; serialized with the collector's field names."""
    job_id: str = Field(serialization_alias="testId")
    report: Dict[str, Any] = Field(serialization_alias="results")
    delivered_at: datetime = Field(serialization_alias="timestamp")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
