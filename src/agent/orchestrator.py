"""
Agent Orchestrator.

Runs one sense -> think -> act -> learn cycle over every learner flagged as
needing attention:

    SENSE  find learners needing attention (failure aborts the tick)
    THINK  DecisionEngine.decide(state, memory)
    ACT    dispatch the decision to the content generator and stores
    LEARN  refresh memory (last_updated, first-observed best time of day)

Learners are processed sequentially in the order the store returns them.
A failure for one learner is recorded as an error string and the cycle
moves on to the next learner.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime

from loguru import logger

from src.agent.decision_engine import DecisionEngine
from src.core.exceptions import LearnerNotFoundError
from src.core.interfaces import (
    IContentGenerator,
    IDecisionLogRepository,
    ILearnerStateRepository,
    ILessonRepository,
    IMemoryRepository,
    IQuizRepository,
)
from src.core.types import (
    Decision,
    GenerateLesson,
    GenerateQuiz,
    LearnerMemory,
    LearnerState,
    QuizAnalysis,
    TickResult,
    UpdateMastery,
    Wait,
    clamp_mastery,
    describe_decision,
    utcnow,
)
from src.llm.schemas import LessonContext


class AgentOrchestrator:
    """Coordinates the decision engine, content generator and stores."""

    def __init__(
        self,
        engine: DecisionEngine,
        generator: IContentGenerator,
        learner_repo: ILearnerStateRepository,
        memory_repo: IMemoryRepository,
        lesson_repo: ILessonRepository,
        quiz_repo: IQuizRepository,
        decision_log: IDecisionLogRepository | None = None,
    ):
        self.engine = engine
        self.generator = generator
        self.learner_repo = learner_repo
        self.memory_repo = memory_repo
        self.lesson_repo = lesson_repo
        self.quiz_repo = quiz_repo
        self.decision_log = decision_log

    async def step(self) -> TickResult:
        """Run one full agent cycle."""
        result = TickResult(tick_id=str(uuid.uuid4()))

        try:
            logger.info("👁️  SENSE: looking for learners needing attention")
            learners = await self.learner_repo.find_learners_needing_attention()
        except Exception as e:
            logger.error("Critical error in agent tick: {}", e)
            result.errors.append(f"Critical error in agent tick: {e}")
            return result

        if not learners:
            logger.info("No learners need attention")
            return result

        logger.info("Found {} learner(s) needing attention", len(learners))

        for state in learners:
            started = time.perf_counter()
            decision: Decision | None = None
            try:
                thought = await self._think(state)
                if thought is None:
                    continue
                memory, decision = thought
                result.decisions.append(decision)
                await self.execute(decision, state)
                await self.learn(memory, decision)
            except Exception as e:
                message = f"Error processing learner {state.learner_id}: {e}"
                logger.error(message)
                result.errors.append(message)
                await self._log_decision(result.tick_id, state.learner_id, decision, False, str(e), started)
                continue

            result.processed += 1
            await self._log_decision(result.tick_id, state.learner_id, decision, True, None, started)

        logger.info(
            "Tick {} complete: {} processed, {} error(s)",
            result.tick_id[:8],
            result.processed,
            len(result.errors),
        )
        return result

    async def _think(self, state: LearnerState) -> tuple[LearnerMemory, Decision] | None:
        memory = await self.memory_repo.get_memory(state.learner_id)
        if memory is None:
            logger.warning("No memory for learner {}, skipping", state.learner_id)
            return None

        logger.info("🧠 THINK: deciding for learner {} (mastery {:.0f})", state.learner_id, state.mastery_level)
        decision = self.engine.decide(state, memory)
        logger.info("Decision for {}: {}", state.learner_id, decision.kind)
        return memory, decision

    # ------------------------------------------------------------------
    # Act
    # ------------------------------------------------------------------

    async def execute(self, decision: Decision, state: LearnerState) -> None:
        """Apply a decision's side effects for one learner."""
        logger.info("⚡ ACT: {} for learner {}", decision.kind, state.learner_id)

        if isinstance(decision, GenerateLesson):
            await self._generate_lesson(decision, state)
        elif isinstance(decision, GenerateQuiz):
            await self._generate_quiz(decision, state)
        elif isinstance(decision, UpdateMastery):
            await self._update_mastery(decision)
        elif isinstance(decision, Wait):
            logger.info("⏸️  Waiting: {}", decision.reason)
        else:
            raise TypeError(f"Unknown decision type: {type(decision).__name__}")

    async def _generate_lesson(self, decision: GenerateLesson, state: LearnerState) -> None:
        lesson = await self.generator.generate_lesson(
            decision.topic,
            decision.difficulty,
            LessonContext(mastery_level=state.mastery_level),
        )
        await self.lesson_repo.save_lesson(lesson, state.learner_id, decision.topic, decision.difficulty)
        await self.learner_repo.record_activity(state.learner_id, "lesson_generated")
        logger.info("📚 Lesson '{}' saved for learner {}", lesson.title, state.learner_id)

    async def _generate_quiz(self, decision: GenerateQuiz, state: LearnerState) -> None:
        quiz = await self.generator.generate_quiz(decision.topic, decision.difficulty, decision.question_count)
        await self.quiz_repo.save_quiz(quiz, state.learner_id, decision.topic, decision.difficulty)
        await self.learner_repo.record_activity(state.learner_id, "quiz_generated")
        logger.info("📝 Quiz '{}' ({} questions) saved for learner {}", quiz.title, len(quiz.questions), state.learner_id)

    async def _update_mastery(self, decision: UpdateMastery) -> None:
        current = await self.learner_repo.get_learner_state(decision.learner_id)
        if current is None:
            raise LearnerNotFoundError(decision.learner_id)
        new_level = clamp_mastery(current.mastery_level + decision.adjustment)
        await self.learner_repo.update_mastery_level(decision.learner_id, decision.topic, new_level)
        logger.info(
            "📈 Mastery for {} on '{}': {:.0f} -> {:.0f}",
            decision.learner_id,
            decision.topic,
            current.mastery_level,
            new_level,
        )

    # ------------------------------------------------------------------
    # Learn
    # ------------------------------------------------------------------

    async def learn(self, memory: LearnerMemory, decision: Decision, now: datetime | None = None) -> None:
        """Fold the outcome of a decision into long-term memory."""
        now = now or utcnow()
        memory.last_updated = now
        if isinstance(decision, GenerateLesson | GenerateQuiz):
            # First observation wins
            if memory.learning_patterns.best_time_of_day is None:
                memory.learning_patterns.best_time_of_day = f"{now.hour:02d}:00"
        await self.memory_repo.update_memory(memory)
        logger.debug("💾 LEARN: memory updated for learner {}", memory.learner_id)

    # ------------------------------------------------------------------
    # Quiz follow-up
    # ------------------------------------------------------------------

    async def process_quiz_result(self, learner_id: str, analysis: QuizAnalysis) -> Decision:
        """
        React to a scored quiz outside the periodic tick.

        Records the score, asks the engine for a follow-up decision, executes
        it and updates memory.

        Raises:
            LearnerNotFoundError: If the learner has no state
        """
        state = await self.learner_repo.get_learner_state(learner_id)
        if state is None:
            raise LearnerNotFoundError(learner_id)

        percentage = analysis.percentage
        await self.learner_repo.record_quiz_score(learner_id, percentage)
        await self.memory_repo.add_performance_record(learner_id, state.current_topic, percentage)

        decision = self.engine.analyze_quiz_results(analysis, state)
        logger.info("Quiz follow-up for {} ({:.0f}%): {}", learner_id, percentage, decision.kind)

        await self.execute(decision, state)
        memory = await self.memory_repo.get_or_create_memory(learner_id)
        await self.learn(memory, decision)
        return decision

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    async def _log_decision(
        self,
        tick_id: str,
        learner_id: str,
        decision: Decision | None,
        success: bool,
        error: str | None,
        started: float,
    ) -> None:
        if self.decision_log is None:
            return
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        try:
            await self.decision_log.log_decision(tick_id, learner_id, decision, success, error, elapsed_ms)
        except Exception as e:
            logger.warning("Failed to write decision log for {}: {}", learner_id, e)
        else:
            if decision is not None:
                logger.debug("Logged decision {}", describe_decision(decision))
