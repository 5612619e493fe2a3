"""Historical reimbursement and prediction schemas."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict


class HistoricalReimbursementRecord(BaseModel):
    """One observed real-world insurer payment. Append-only."""

    model_config = ConfigDict(frozen=True)

    insurer: str
    procedure_code: str
    charged_amount: float
    paid_amount: float
    patient_responsibility: float | None = None
    date_of_service: date
    # Plan attributes
    plan_type: str | None = None
    deductible_met: bool | None = None
    region: str | None = None
    patient_age: int | None = None
    session_type: str | None = None


class PredictionQuery(BaseModel):
    """What to predict: one insurer, one procedure code, one charge."""

    insurer: str
    procedure_code: str
    charged_amount: float = 0.0
    plan_type: str | None = None
    deductible_met: bool | None = None
    region: str | None = None
    patient_age: int | None = None
    session_type: str | None = None
    as_of: date | None = None


class PredictionTrends(BaseModel):
    """Trend signals derived from the candidate records."""

    recent_trend_pct: float = 0.0
    seasonal_variation: float = 0.0


class Prediction(BaseModel):
    """Estimated insurer payment with confidence and trend signals."""

    procedure_code: str
    insurer: str
    predicted_reimbursement: float
    confidence: float
    data_points: int
    trends: PredictionTrends = PredictionTrends()
    recommendations: list[str] = []
    is_fallback: bool = False


class HistoryFilter(BaseModel):
    """Narrow query against the historical reimbursement store."""

    insurer: str | None = None
    procedure_codes: list[str] = []
    since: date | None = None


class TrainingDataExport(BaseModel):
    """Flattened history for external model training."""

    features: list[dict[str, Any]] = []
    labels: list[float] = []
    total_records: int = 0
    date_range: list[date] = []
