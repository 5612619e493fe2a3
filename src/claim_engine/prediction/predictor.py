"""Historical reimbursement predictor.

Scores past insurer payments for relevance to a query and turns them into a
weighted estimate with confidence and trend signals. Every public method is
total: empty or unrelated history resolves to a static fallback rate.
"""

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from ..schemas.reimbursement import (
    HistoricalReimbursementRecord,
    Prediction,
    PredictionQuery,
    PredictionTrends,
    TrainingDataExport,
)
from .similarity import are_similar_codes, are_similar_insurers
from .stats import half_split_trend, mean, seasonal_variation, variance

logger = logging.getLogger(__name__)

# Industry averages used when no history matches a query
FALLBACK_RATES: dict[str, dict[str, float]] = {
    "UnitedHealth": {"97166": 85, "97530": 75, "97110": 70},
    "Anthem": {"97166": 80, "97530": 70, "97110": 65},
    "Aetna": {"97166": 82, "97530": 72, "97110": 68},
    "BCBS": {"97166": 88, "97530": 78, "97110": 73},
    "Cigna": {"97166": 79, "97530": 69, "97110": 64},
}
DEFAULT_FALLBACK_RATE = 70.0
FALLBACK_CONFIDENCE = 0.3

# Relevance weights
EXACT_INSURER_SCORE = 50
EXACT_CODE_SCORE = 50
MAX_RECENCY_SCORE = 30
PLAN_TYPE_SCORE = 20
DEDUCTIBLE_SCORE = 10
REGION_SCORE = 15

FULL_CONFIDENCE_SAMPLE = 20
RECENT_WINDOW_DAYS = 180
DECLINE_WINDOW_DAYS = 90
LIMITED_DATA_THRESHOLD = 5
HIGH_VARIABILITY_RATIO = 0.3
DECLINING_TREND_THRESHOLD = -0.1


class ReimbursementPredictor:
    """Predict insurer payments from append-only reimbursement history."""

    def __init__(self, records: Iterable[HistoricalReimbursementRecord] | None = None):
        self._records: list[HistoricalReimbursementRecord] = list(records or [])

    @property
    def records(self) -> tuple[HistoricalReimbursementRecord, ...]:
        return tuple(self._records)

    def add_record(self, record: HistoricalReimbursementRecord) -> None:
        """Append one observed payment."""
        self._records.append(record)

    def import_records(self, records: Iterable[HistoricalReimbursementRecord]) -> None:
        """Append a batch of observed payments."""
        self._records.extend(records)

    def predict(self, query: PredictionQuery) -> Prediction:
        """Predict the payment for one insurer and procedure code."""
        as_of = query.as_of or date.today()
        candidates = self._relevant_records(query, as_of)

        if not candidates:
            return _fallback_prediction(query)

        scored = [(record, relevance_score(record, query, as_of)) for record in candidates]
        amount, confidence = _weighted_estimate(scored)

        return Prediction(
            procedure_code=query.procedure_code,
            insurer=query.insurer,
            predicted_reimbursement=amount,
            confidence=confidence,
            data_points=len(candidates),
            trends=_analyze_trends(candidates, as_of),
            recommendations=_recommendations(candidates, as_of),
        )

    def predict_many(
        self,
        insurer: str,
        procedure_codes: Iterable[str],
        base_query: PredictionQuery | None = None,
    ) -> dict[str, Prediction]:
        """Predict several codes for one insurer, each independently."""
        template = base_query or PredictionQuery(insurer=insurer, procedure_code="")
        return {
            code: self.predict(
                template.model_copy(update={"insurer": insurer, "procedure_code": code})
            )
            for code in procedure_codes
        }

    def export_training_data(self, as_of: date | None = None) -> TrainingDataExport:
        """Flatten the history into feature rows and paid-amount labels."""
        as_of = as_of or date.today()
        features = [
            {
                "insurer": r.insurer,
                "procedure_code": r.procedure_code,
                "charged_amount": r.charged_amount,
                "plan_type": r.plan_type or "unknown",
                "deductible_met": bool(r.deductible_met),
                "region": r.region or "unknown",
                "patient_age": r.patient_age or 0,
                "session_type": r.session_type or "unknown",
                "days_since_service": (as_of - r.date_of_service).days,
            }
            for r in self._records
        ]
        dates = sorted(r.date_of_service for r in self._records)

        return TrainingDataExport(
            features=features,
            labels=[r.paid_amount for r in self._records],
            total_records=len(self._records),
            date_range=[dates[0], dates[-1]] if dates else [],
        )

    def _relevant_records(
        self, query: PredictionQuery, as_of: date
    ) -> list[HistoricalReimbursementRecord]:
        """Records for the same or a similar insurer and code, most relevant first."""
        matches = [
            record
            for record in self._records
            if (
                record.insurer == query.insurer
                or are_similar_insurers(record.insurer, query.insurer)
            )
            and (
                record.procedure_code == query.procedure_code
                or are_similar_codes(record.procedure_code, query.procedure_code)
            )
        ]
        matches.sort(key=lambda r: relevance_score(r, query, as_of), reverse=True)
        return matches


def relevance_score(
    record: HistoricalReimbursementRecord, query: PredictionQuery, as_of: date
) -> float:
    """How much a historical record should weigh in a prediction."""
    score = 0.0

    if record.insurer == query.insurer:
        score += EXACT_INSURER_SCORE
    if record.procedure_code == query.procedure_code:
        score += EXACT_CODE_SCORE

    days_since = max(0, (as_of - record.date_of_service).days)
    score += max(0.0, MAX_RECENCY_SCORE - days_since / 30)

    if record.plan_type and query.plan_type and record.plan_type == query.plan_type:
        score += PLAN_TYPE_SCORE
    if record.deductible_met == query.deductible_met:
        score += DEDUCTIBLE_SCORE
    if record.region and query.region and record.region == query.region:
        score += REGION_SCORE

    return score


def _weighted_estimate(
    scored: list[tuple[HistoricalReimbursementRecord, float]],
) -> tuple[float, float]:
    """Relevance-weighted paid amount and its confidence."""
    paid = [record.paid_amount for record, _ in scored]
    total_weight = sum(weight for _, weight in scored)

    if total_weight > 0:
        amount = sum(record.paid_amount * weight for record, weight in scored) / total_weight
    else:
        amount = mean(paid)

    spread = variance(paid)
    if spread == 0:
        data_consistency = 1.0
    elif amount > 0:
        data_consistency = max(0.0, 1 - spread / amount)
    else:
        data_consistency = 0.0
    sample_confidence = min(1.0, len(scored) / FULL_CONFIDENCE_SAMPLE)

    confidence = data_consistency * 0.7 + sample_confidence * 0.3
    return round(amount, 2), round(confidence, 2)


def _analyze_trends(
    records: list[HistoricalReimbursementRecord], as_of: date
) -> PredictionTrends:
    """Six-month change and seasonal variation of paid amounts."""
    cutoff = as_of - timedelta(days=RECENT_WINDOW_DAYS)
    recent = [r.paid_amount for r in records if r.date_of_service >= cutoff]
    older = [r.paid_amount for r in records if r.date_of_service < cutoff]

    older_avg = mean(older)
    recent_pct = (mean(recent) - older_avg) / older_avg * 100 if older_avg > 0 else 0.0
    seasonal = seasonal_variation([(r.date_of_service, r.paid_amount) for r in records])

    return PredictionTrends(
        recent_trend_pct=round(recent_pct, 2),
        seasonal_variation=round(seasonal, 2),
    )


def _recommendations(records: list[HistoricalReimbursementRecord], as_of: date) -> list[str]:
    """Plain-language caveats about the estimate."""
    recommendations: list[str] = []

    if len(records) < LIMITED_DATA_THRESHOLD:
        recommendations.append(
            "Limited historical data available. Estimates may be less accurate."
        )

    paid = [r.paid_amount for r in records]
    avg = mean(paid)
    if avg > 0 and variance(paid) / avg > HIGH_VARIABILITY_RATIO:
        recommendations.append(
            "High variability in reimbursements. Consider verifying plan details."
        )

    recent = sorted(
        (r for r in records if (as_of - r.date_of_service).days < DECLINE_WINDOW_DAYS),
        key=lambda r: r.date_of_service,
    )
    if len(recent) > 2 and half_split_trend([r.paid_amount for r in recent]) < DECLINING_TREND_THRESHOLD:
        recommendations.append("Recent downward trend in reimbursements detected.")

    return recommendations


def _fallback_prediction(query: PredictionQuery) -> Prediction:
    """Static industry-average estimate for queries with no usable history."""
    rate = FALLBACK_RATES.get(query.insurer, {}).get(query.procedure_code, DEFAULT_FALLBACK_RATE)
    logger.debug(
        "No history for %s/%s, using fallback rate %.2f",
        query.insurer,
        query.procedure_code,
        rate,
    )
    return Prediction(
        procedure_code=query.procedure_code,
        insurer=query.insurer,
        predicted_reimbursement=float(rate),
        confidence=FALLBACK_CONFIDENCE,
        data_points=0,
        trends=PredictionTrends(),
        recommendations=[
            "Using industry averages. Upload historical data for accurate predictions."
        ],
        is_fallback=True,
    )
