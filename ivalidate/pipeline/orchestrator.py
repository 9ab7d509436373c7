"""Validation pipeline orchestrator.

Runs the fixed step sequence for one validation run and persists the
record after every step transition. Clients observe a run only by
re-reading its record.

Design Decisions:
- Steps run strictly in order; each step's payload feeds later steps
- Any step failure aborts the run; nothing after it is attempted
- execute() never raises: failures become a FAILED record and result
- Progress only moves forward, even when checkpoints repeat
- No retries here; provider overload retries live in the LLM layer
- Zero discussions found is still a successful discussion step
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

import structlog

from ivalidate.config.settings import Settings, get_settings
from ivalidate.errors import (
    IdeaValidationError,
    PreconditionError,
    StepExecutionError,
)
from ivalidate.llm import GenerativeTextProvider
from ivalidate.models.enums import StepStatus, ValidationStatus
from ivalidate.models.evidence import DiscussionInsight
from ivalidate.models.report import EvidenceReport
from ivalidate.models.research import (
    CompetitorResearch,
    KeywordPlan,
    MarketSizeResearch,
    MoatResearch,
    ScalabilityResearch,
    SentimentSummary,
    StartupAnalysis,
    UniquenessResearch,
)
from ivalidate.models.scoring import ScoreResult
from ivalidate.models.validation import RefinedIdea, StepRecord, ValidationTrigger
from ivalidate.reports import build_evidence_report, format_evidence_report
from ivalidate.research import (
    analyze_startup,
    generate_targeting,
    research_competitors,
    research_market_size,
    research_moat,
    research_scalability,
    research_uniqueness,
    search_discussions,
)
from ivalidate.research.discussion_search import search_queries
from ivalidate.scoring import calculate_validation_score, round_half_up
from ivalidate.sources.discussion import DiscussionSource
from ivalidate.storage import RecordStore, to_jsonable, utc_now

from .steps import DEFAULT_STEP_TEMPLATES, StepBoard, StepResult, StepTemplate
from .trace import KEYWORD_TRACE_STEP, SEARCH_TRACE_STEP, keyword_trace, search_trace

logger = structlog.get_logger(__name__)

FAILED_STEP_TEXT = "Pipeline execution failed"


@dataclass
class ResearchPayloads:
    """Typed payloads produced by the research steps."""

    keywords: KeywordPlan | None = None
    discussion: DiscussionInsight | None = None
    sentiment: SentimentSummary | None = None
    competitors: CompetitorResearch | None = None
    market_size: MarketSizeResearch | None = None
    scalability: ScalabilityResearch | None = None
    moat: MoatResearch | None = None
    uniqueness: UniquenessResearch | None = None


@dataclass
class PipelineResult:
    """Outcome of one pipeline execution."""

    success: bool
    steps: list[StepRecord]
    final_score: ScoreResult | None = None
    research: ResearchPayloads = field(default_factory=ResearchPayloads)
    analysis: StartupAnalysis | None = None
    evidence_report: EvidenceReport | None = None
    formatted_report: str | None = None
    total_data_points: int = 0
    error: str | None = None


StepFunction = Callable[[], Awaitable[StepResult]]


class ValidationPipeline:
    """Executes the validation steps for a single run."""

    def __init__(
        self,
        trigger: ValidationTrigger,
        store: RecordStore,
        provider: GenerativeTextProvider,
        source: DiscussionSource,
        settings: Settings | None = None,
        templates: Sequence[StepTemplate] = DEFAULT_STEP_TEMPLATES,
    ):
        self.trigger = trigger
        self.store = store
        self.provider = provider
        self.source = source
        self.settings = settings or get_settings()

        self._step_functions: list[tuple[StepFunction, type]] = [
            (self._extract_keywords, KeywordPlan),
            (self._search_discussions, DiscussionInsight),
            (self._analyze_sentiment, SentimentSummary),
            (self._research_competitors, CompetitorResearch),
            (self._research_market_size, MarketSizeResearch),
            (self._research_scalability, ScalabilityResearch),
            (self._research_moat, MoatResearch),
            (self._research_uniqueness, UniquenessResearch),
            (self._generate_analysis, StartupAnalysis),
            (self._calculate_scores, ScoreResult),
        ]
        if len(templates) != len(self._step_functions):
            raise ValueError(
                f"Expected {len(self._step_functions)} step templates, got {len(templates)}"
            )

        self.board = StepBoard(templates)
        self.research = ResearchPayloads()
        self.analysis: StartupAnalysis | None = None
        self.evidence_report: EvidenceReport | None = None
        self.formatted_report: str | None = None
        self.final_score: ScoreResult | None = None
        self.total_data_points = 0
        self._progress = 0
        self._current_step = "Queued for validation"

    @property
    def validation_id(self) -> str:
        return self.trigger.id

    @property
    def progress(self) -> int:
        return self._progress

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(self) -> PipelineResult:
        """Run every step in order.

        Returns:
            PipelineResult. Failures are reported in the result and the
            persisted record, never raised.
        """
        logger.info("pipeline_started", validation_id=self.validation_id, steps=len(self.board))

        try:
            self._require_refined_idea()
            await self._persist({"status": ValidationStatus.PROCESSING})
        except Exception as e:
            return await self._fail_run(self._classify(e, None))

        for index, (run_step, expected_type) in enumerate(self._step_functions, 1):
            try:
                await self._start_step(index)
                result = await run_step()
                self._check_result(index, result, expected_type)
                await self._complete_step(index, result)
            except Exception as e:
                error = self._classify(e, index)
                self._mark_step_failed(index, error)
                return await self._fail_run(error)

        try:
            await self._persist_completion()
        except Exception as e:
            return await self._fail_run(self._classify(e, None))

        logger.info(
            "pipeline_completed",
            validation_id=self.validation_id,
            score=self.final_score.overall.score if self.final_score else None,
            grade=self.final_score.overall.grade.value if self.final_score else None,
            total_data_points=self.total_data_points,
        )
        return PipelineResult(
            success=True,
            steps=self.board.steps,
            final_score=self.final_score,
            research=self.research,
            analysis=self.analysis,
            evidence_report=self.evidence_report,
            formatted_report=self.formatted_report,
            total_data_points=self.total_data_points,
        )

    def _require_refined_idea(self) -> RefinedIdea:
        if self.trigger.refined_idea is None:
            raise PreconditionError(
                "Refined idea data (one_liner, target_audience, problem) is required to start validation"
            )
        return self.trigger.refined_idea

    def _check_result(self, index: int, result: Any, expected_type: type) -> None:
        title = self.board.template(index).title
        if not isinstance(result, StepResult):
            raise StepExecutionError(f"{title} returned {type(result).__name__}", step_index=index)
        if not result.success:
            raise StepExecutionError(result.summary or f"{title} reported failure", step_index=index)
        if not isinstance(result.data, expected_type):
            raise StepExecutionError(
                f"{title} produced {type(result.data).__name__}, expected {expected_type.__name__}",
                step_index=index,
            )

    @staticmethod
    def _classify(error: Exception, index: int | None) -> IdeaValidationError:
        if isinstance(error, IdeaValidationError):
            return error
        wrapped = StepExecutionError(f"{type(error).__name__}: {error}", step_index=index)
        wrapped.__cause__ = error
        return wrapped

    # =========================================================================
    # Persistence
    # =========================================================================

    async def _persist(self, updates: dict[str, Any] | None = None) -> None:
        payload = {
            "progress": self._progress,
            "current_step": self._current_step,
            "processing_steps": self.board.steps,
        }
        payload.update(updates or {})
        await self.store.update_validation(self.validation_id, payload)

    async def _start_step(self, index: int) -> None:
        record = self.board.transition(index, StepStatus.PROCESSING)
        self._current_step = record.description
        logger.info("step_started", validation_id=self.validation_id, step=index, title=record.title)
        await self._persist()

    async def _complete_step(self, index: int, result: StepResult) -> None:
        template = self.board.template(index)
        summary = result.summary or template.description
        progress = max(self._progress, template.target_progress)

        # The board commits only after the completed snapshot is stored
        steps = self.board.steps
        steps[index - 1] = steps[index - 1].model_copy(update={
            "status": StepStatus.COMPLETED,
            "description": summary,
            "data_points_found": result.data_points,
        })
        await self._persist({
            "progress": progress,
            "current_step": summary,
            "processing_steps": steps,
        })

        self.board.transition(
            index,
            StepStatus.COMPLETED,
            description=summary,
            data_points=result.data_points,
        )
        self._progress = progress
        self._current_step = summary
        logger.info(
            "step_completed",
            validation_id=self.validation_id,
            step=index,
            progress=self._progress,
            data_points=result.data_points,
        )

    def _mark_step_failed(self, index: int, error: Exception) -> None:
        record = self.board[index]
        if record.status != StepStatus.PROCESSING:
            return
        self.board.transition(index, StepStatus.FAILED, error_message=str(error))
        logger.error(
            "step_failed",
            validation_id=self.validation_id,
            step=index,
            title=record.title,
            error_type=type(error).__name__,
            error=str(error),
        )

    async def _fail_run(self, error: IdeaValidationError) -> PipelineResult:
        message = str(error) or type(error).__name__
        self._current_step = FAILED_STEP_TEXT
        try:
            await self._persist({
                "status": ValidationStatus.FAILED,
                "error_message": message,
                "completed_at": utc_now(),
            })
        except Exception as persist_error:
            logger.error(
                "pipeline_failure_not_persisted",
                validation_id=self.validation_id,
                error=str(persist_error),
            )

        logger.error(
            "pipeline_failed",
            validation_id=self.validation_id,
            error_type=type(error).__name__,
            error=message,
        )
        return PipelineResult(
            success=False,
            steps=self.board.steps,
            research=self.research,
            analysis=self.analysis,
            error=message,
        )

    async def _persist_completion(self) -> None:
        research = self.research
        await self._persist({
            "status": ValidationStatus.COMPLETED,
            "final_score": self.final_score,
            "competitor_data": to_jsonable(research.competitors),
            "market_size_data": to_jsonable(research.market_size),
            "scalability_data": to_jsonable(research.scalability),
            "moat_data": to_jsonable(research.moat),
            "uniqueness_data": to_jsonable(research.uniqueness),
            "discussion_data": to_jsonable(research.discussion),
            "analysis": to_jsonable(self.analysis),
            "evidence_report": to_jsonable(self.evidence_report),
            "formatted_report": self.formatted_report,
            "total_data_points": self.total_data_points,
            "completed_at": utc_now(),
        })

    # =========================================================================
    # Steps
    # =========================================================================

    def _require(self, value: Any, name: str) -> Any:
        if value is None:
            raise StepExecutionError(f"Required input missing: {name}")
        return value

    async def _extract_keywords(self) -> StepResult:
        idea = self._require_refined_idea()
        try:
            plan = await generate_targeting(idea, self.provider, self.settings)
        except Exception as e:
            await self.store.append_debug_entry(
                self.validation_id, KEYWORD_TRACE_STEP, keyword_trace(idea), success=False, error=str(e)
            )
            raise
        await self.store.append_debug_entry(
            self.validation_id, KEYWORD_TRACE_STEP, keyword_trace(idea, plan), success=True
        )

        self.research.keywords = plan
        return StepResult(
            success=True,
            data=plan,
            data_points=len(plan.search_keywords) + len(plan.recommended_communities),
            summary=(
                f"AI found {len(plan.recommended_communities)} target communities"
                f" + {len(plan.search_keywords)} keywords"
            ),
        )

    async def _search_discussions(self) -> StepResult:
        plan = self._require(self.research.keywords, "keyword plan")
        queries = search_queries(plan, self.settings)
        try:
            insight = await search_discussions(
                plan, self._require_refined_idea(), self.source, self.provider, self.settings,
                cache=self.store,
            )
        except Exception as e:
            await self.store.append_debug_entry(
                self.validation_id, SEARCH_TRACE_STEP, search_trace(plan, queries), success=False, error=str(e)
            )
            raise
        await self.store.append_debug_entry(
            self.validation_id, SEARCH_TRACE_STEP, search_trace(plan, queries, insight), success=True
        )

        self.research.discussion = insight
        mentions = insight.metrics.total_mentions
        # Zero discussions still counts as success
        return StepResult(
            success=True,
            data=insight,
            data_points=mentions,
            summary=f"Found {mentions} real discussions",
        )

    async def _analyze_sentiment(self) -> StepResult:
        insight: DiscussionInsight = self._require(self.research.discussion, "discussion insight")
        metrics = insight.metrics
        total = metrics.total_mentions
        percent = round_half_up(metrics.frustrated_users * 100 / total) if total > 0 else 0
        summary = SentimentSummary(
            total_mentions=total,
            frustrated_users=metrics.frustrated_users,
            frustration_percent=percent,
            has_data=total > 0,
        )
        self.research.sentiment = summary

        if not summary.has_data:
            text = "No posts found - continuing with limited data analysis"
        else:
            text = f"{percent}% of users frustrated with current solutions"
        return StepResult(success=True, data=summary, data_points=total, summary=text)

    async def _research_competitors(self) -> StepResult:
        research = await research_competitors(self._require_refined_idea(), self.provider, self.settings)
        self.research.competitors = research
        return StepResult(
            success=True,
            data=research,
            data_points=research.total_competitors + research.complaint_count,
            summary=f"Found {research.total_competitors} competitors, {research.complaint_count} user complaints",
        )

    async def _research_market_size(self) -> StepResult:
        research = await research_market_size(self._require_refined_idea(), self.provider, self.settings)
        self.research.market_size = research
        tam_millions = research.total_addressable_market.value / 1_000_000
        return StepResult(
            success=True,
            data=research,
            data_points=len(research.market_segments),
            summary=f"TAM: ${tam_millions:.1f}M, Growth: {research.market_growth_rate.annual:g}%",
        )

    async def _research_scalability(self) -> StepResult:
        research = await research_scalability(self._require_refined_idea(), self.provider, self.settings)
        self.research.scalability = research
        return StepResult(
            success=True,
            data=research,
            data_points=len(research.scaling_factors),
            summary=(
                f"Scalability Score: {research.scalability_score}/100, "
                f"Model: {research.business_model.type}"
            ),
        )

    async def _research_moat(self) -> StepResult:
        research = await research_moat(self._require_refined_idea(), self.provider, self.settings)
        self.research.moat = research
        factors = len(research.defensibility_factors)
        return StepResult(
            success=True,
            data=research,
            data_points=factors,
            summary=f"Moat Score: {research.moat_score}/100, {factors} factors identified",
        )

    async def _research_uniqueness(self) -> StepResult:
        research = await research_uniqueness(self._require_refined_idea(), self.provider, self.settings)
        self.research.uniqueness = research
        advantages = len(research.competitive_advantages)
        return StepResult(
            success=True,
            data=research,
            data_points=advantages,
            summary=f"UVZ Score: {research.uniqueness_score}/100, {advantages} advantages identified",
        )

    async def _generate_analysis(self) -> StepResult:
        insight = self._require(self.research.discussion, "discussion insight")
        analysis = await analyze_startup(
            self.trigger.idea_description, insight, self.provider, self.settings
        )
        self.analysis = analysis
        return StepResult(
            success=True,
            data=analysis,
            data_points=len(analysis.risks) + len(analysis.opportunities),
            summary="AI analysis completed",
        )

    async def _calculate_scores(self) -> StepResult:
        insight: DiscussionInsight = self._require(self.research.discussion, "discussion insight")
        competitors: CompetitorResearch = self._require(self.research.competitors, "competitor research")

        score = calculate_validation_score(insight)
        report = build_evidence_report(insight, self.analysis, score)

        self.final_score = score
        self.evidence_report = report
        self.formatted_report = format_evidence_report(report, self.trigger.idea_description)
        self.total_data_points = insight.metrics.total_mentions + competitors.total_competitors

        return StepResult(
            success=True,
            data=score,
            data_points=self.total_data_points,
            summary=(
                f"Validation complete! Grade: {score.overall.grade.value}"
                f" ({self.total_data_points} data points analyzed)"
            ),
        )
