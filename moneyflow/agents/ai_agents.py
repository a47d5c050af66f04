"""
AI Agents for MoneyFlow

DESIGN DECISION: The LLM only writes commentary. It receives totals that
were already computed by the budget engine and returns a short, structured
verdict. It never computes, stores or changes any financial figure.

CRITICAL BOUNDARIES:

COMMENTARY AGENT:
   - CAN: Classify the month as GOOD / WARNING / CRITICAL
   - CAN: Suggest one concrete action
   - CANNOT: Change transactions, categories or settings
   - MUST: Fall back to a fixed advisory when the service is unavailable

A missing API key, a network error or an unparseable reply all end the
same way: the user sees a non-blocking notice and the rest of the app
keeps working. There is no retry.
"""

import json
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

import google.generativeai as genai
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from moneyflow.audit import AuditLogger
from moneyflow.config import GeminiSettings, get_settings
from moneyflow.engine.budget import summarize_month
from moneyflow.models.audit import AuditEventBuilder
from moneyflow.models.finance import Category, Transaction
from moneyflow.models.report import MonthlySummary


class Sentiment(str, Enum):
    GOOD = "GOOD"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class SpendingInsight(BaseModel):
    """
    Structured commentary on the current month.

    `is_fallback` is True when this is the default notice shown because
    the AI service could not be reached.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sentiment: Sentiment
    title: str = Field(max_length=200)
    message: str = Field(max_length=1000)
    action_item: str = Field(alias="actionItem", max_length=500)
    is_fallback: bool = False


class CommentaryInput(BaseModel):
    """What the model is allowed to see: aggregates only, no raw notes."""

    total_income: Decimal
    total_expense: Decimal
    breakdown: dict[str, Decimal]
    count: int

    @classmethod
    def from_summary(cls, summary: MonthlySummary) -> "CommentaryInput":
        return cls(
            total_income=summary.total_income,
            total_expense=summary.total_expense,
            breakdown=dict(summary.expense_by_category),
            count=summary.transaction_count,
        )

    def to_prompt_json(self) -> str:
        return json.dumps(
            {
                "totalIncome": float(self.total_income),
                "totalExpense": float(self.total_expense),
                "breakdown": {k: float(v) for k, v in self.breakdown.items()},
                "count": self.count,
            },
            ensure_ascii=False,
        )


FALLBACK_INSIGHT = SpendingInsight(
    sentiment=Sentiment.WARNING,
    title="Lỗi kết nối",
    message="Không thể kết nối với chuyên gia AI lúc này. Vui lòng thử lại sau.",
    action_item="Kiểm tra kết nối mạng hoặc API Key.",
    is_fallback=True,
)


class CommentaryUnavailableError(Exception):
    """The AI service is not configured or did not return usable output."""
    pass


def prepare_data_for_ai(
    transactions: list[Transaction],
    categories: list[Category],
    now: date,
) -> CommentaryInput:
    """Current-month aggregates in the shape the prompt expects."""
    return CommentaryInput.from_summary(summarize_month(transactions, categories, now))


def parse_insight(text: str) -> SpendingInsight:
    """
    Extract the JSON object from a model reply.

    Raises:
        CommentaryUnavailableError: If no valid object can be found
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise CommentaryUnavailableError("Model reply contained no JSON object")
    try:
        data: dict[str, Any] = json.loads(text[start:end])
        if isinstance(data.get("sentiment"), str):
            data["sentiment"] = data["sentiment"].upper()
        data.pop("is_fallback", None)
        return SpendingInsight.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise CommentaryUnavailableError(f"Model reply was not a valid insight: {e}")


class CommentaryAgent:
    """
    AI agent that comments on the month's spending.

    RESPONSIBILITIES:
    - Turn the month's totals into a verdict, a title, a message
      and one action item

    BOUNDARIES:
    - NEVER sees individual transactions, only aggregates
    - NEVER raises to the caller; failures become FALLBACK_INSIGHT
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            settings: Gemini configuration. Loaded from the environment
                      on first use when not given.
            model: Anything with an async `generate_content_async(prompt)`.
                   Built from settings when not given.
            audit_logger: Receives success and failure events.
        """
        self._settings = settings
        self._model = model
        self._audit_logger = audit_logger

    def _configure_genai(self) -> Any:
        """Configure Google Generative AI on first use."""
        if self._model is not None:
            return self._model

        if self._settings is None:
            try:
                self._settings = get_settings().gemini
            except ValidationError:
                raise CommentaryUnavailableError("GEMINI_API_KEY is not configured")

        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
            },
        )
        return self._model

    @staticmethod
    def build_prompt(data: CommentaryInput) -> str:
        return f"""Bạn là một chuyên gia tài chính cá nhân. Hãy phân tích dữ liệu chi tiêu tháng này (đơn vị: VND) và đưa ra lời khuyên bằng tiếng Việt.

Dữ liệu:
{data.to_prompt_json()}

Trả về DUY NHẤT một đối tượng JSON với các trường:
- "sentiment": "GOOD" nếu chi tiêu hợp lý và tiết kiệm tốt, "WARNING" nếu một số mục đang chi quá tay, "CRITICAL" nếu chi vượt thu hoặc ở mức báo động.
- "title": tiêu đề ngắn (dưới 10 từ).
- "message": nhận xét (dưới 50 từ).
- "actionItem": một hành động cụ thể nên làm ngay."""

    async def analyze(
        self,
        summary: MonthlySummary,
        correlation_id: Optional[UUID] = None,
    ) -> SpendingInsight:
        """
        Ask the model for commentary on `summary`.

        Always returns an insight; check `is_fallback` to tell the
        default notice apart from real commentary.
        """
        data = CommentaryInput.from_summary(summary)

        try:
            model = self._configure_genai()
            try:
                response = await model.generate_content_async(self.build_prompt(data))
                text = (response.text or "").strip()
            except Exception as e:
                if self._audit_logger:
                    self._audit_logger.log(
                        AuditEventBuilder.external_service_error("gemini", str(e), correlation_id)
                    )
                raise
            insight = parse_insight(text)
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log(
                    AuditEventBuilder.commentary_unavailable(str(e), correlation_id)
                )
            return FALLBACK_INSIGHT

        if self._audit_logger:
            self._audit_logger.log(
                AuditEventBuilder.commentary_generated(
                    insight.sentiment.value,
                    data.count,
                    correlation_id,
                )
            )
        return insight
