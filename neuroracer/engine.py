"""
Generation manager for evolving controller networks.

Main orchestration loop:
- Spawn a population of randomly initialized networks
- Drive every active agent once per tick until the generation times out
  or no agent is left active
- Evaluate, rank and select the elite pool
- Breed the next generation (elitism, roulette selection, crossover, mutation)
- Grow the generation duration up to a cap

States: IDLE -> RUNNING -> EVALUATING -> (RUNNING | FINISHED)
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import torch

from .base import Environment, SelectionStrategy
from .config import EvolutionConfig
from .errors import ShapeMismatch
from .fitness import FitnessFunction, Telemetry
from .network import FeedForwardNetwork
from .selection import RouletteWheelSelector
from .utils import make_generator


logger = logging.getLogger(__name__)

# Slack when comparing the accumulated timer with the duration budget
TIME_EPSILON = 1e-9


class GenerationPhase(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    EVALUATING = 'evaluating'
    FINISHED = 'finished'


@dataclass
class Genome:
    """A network plus the telemetry and fitness it earned this generation."""
    network: FeedForwardNetwork
    id: int = 0
    origin: str = 'random'  # random, elite, crossover, clone
    parent_ids: Tuple[int, ...] = ()
    handle: Optional[int] = None
    telemetry: Optional[Telemetry] = None
    fitness: Optional[float] = None


@dataclass
class GenerationState:
    """Timer and index of the generation in progress."""
    generation: int = 0
    duration: float = 0.0
    elapsed: float = 0.0
    ticks: int = 0

    @property
    def time_remaining(self) -> float:
        return max(0.0, self.duration - self.elapsed)


@dataclass
class GenerationSummary:
    """Statistics recorded when a generation ends."""
    generation: int
    best_fitness: float
    mean_fitness: float
    std_fitness: float
    worst_fitness: float
    duration: float
    elapsed: float
    ticks: int
    active_at_end: int
    elite_fitnesses: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generation': self.generation,
            'best_fitness': self.best_fitness,
            'mean_fitness': self.mean_fitness,
            'std_fitness': self.std_fitness,
            'worst_fitness': self.worst_fitness,
            'duration': self.duration,
            'elapsed': self.elapsed,
            'ticks': self.ticks,
            'active_at_end': self.active_at_end,
            'elite_fitnesses': list(self.elite_fitnesses),
        }


class GenerationManager:
    """Runs the generational genetic algorithm against an Environment."""

    def __init__(
        self,
        config: EvolutionConfig,
        environment: Environment,
        generator: Optional[torch.Generator] = None,
        spawn_config: Any = None,
        selector: Optional[SelectionStrategy] = None,
    ):
        config.validate()
        self.config = config
        self.environment = environment
        self.generator = generator if generator is not None else make_generator(config.seed)
        self.spawn_config = spawn_config
        self.selector = selector or RouletteWheelSelector()
        self.fitness_fn = FitnessFunction(config.fitness_weights)

        self.phase = GenerationPhase.IDLE
        self.state = GenerationState(duration=self.duration_after(0))
        self.population: Tuple[Genome, ...] = ()
        self.history: List[GenerationSummary] = []
        self.best_genome: Optional[Genome] = None

        self._stop_requested = False
        self._next_id = 0

    # ------------------------------------------------------------------
    # Derived settings
    # ------------------------------------------------------------------

    @property
    def elite_count(self) -> int:
        """ceil(population_size * elite_fraction), at least one."""
        raw = self.config.population_size * self.config.elite_fraction
        # round first so float noise such as 3.0000000000000004 does not ceil to 4
        return max(1, math.ceil(round(raw, 9)))

    def duration_after(self, completed_generations: int) -> float:
        """Duration budget once `completed_generations` generations have ended."""
        c = self.config
        return min(
            c.generation_duration + completed_generations * c.generation_duration_increase,
            c.max_generation_duration,
        )

    @property
    def finished(self) -> bool:
        return self.phase is GenerationPhase.FINISHED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn generation 0 with freshly randomized networks."""
        if self.phase is not GenerationPhase.IDLE:
            raise RuntimeError(f"Cannot start from phase {self.phase.value}")

        population = []
        for _ in range(self.config.population_size):
            network = self._new_network()
            network.randomize(self.generator)
            population.append(Genome(network=network, id=self._take_id()))

        self._spawn(population)
        self.phase = GenerationPhase.RUNNING
        logger.info(
            f"Starting evolution: {self.config.n_generations} generations, "
            f"pop={self.config.population_size}, elite={self.elite_count}, "
            f"genes={population[0].network.n_genes}"
        )

    def tick(self, dt: Optional[float] = None) -> GenerationPhase:
        """
        Advance the running generation by one fixed timestep.

        Args:
            dt: Timestep in seconds (defaults to config.dt)

        Returns:
            The phase after this tick
        """
        if self.phase is not GenerationPhase.RUNNING:
            return self.phase
        dt = self.config.dt if dt is None else dt
        env = self.environment

        for genome in self.population:
            if not env.is_active(genome.handle):
                continue
            try:
                control = genome.network.infer(env.observe(genome.handle))
            except ShapeMismatch as e:
                logger.warning(f"Genome {genome.id}: skipping step ({e})")
                continue
            env.apply_control(genome.handle, control.tolist())

        env.advance(dt)
        self.state.elapsed += dt
        self.state.ticks += 1

        active = self.active_count()
        if self.state.elapsed >= self.state.duration - TIME_EPSILON or active == 0:
            self._end_generation(active)
        return self.phase

    def run(self, max_ticks: Optional[int] = None, dt: Optional[float] = None) -> List[GenerationSummary]:
        """
        Tick until finished, stopped, or `max_ticks` ticks have run.

        Returns:
            Generation history so far
        """
        if self.phase is GenerationPhase.IDLE:
            self.start()
        self._stop_requested = False

        ticks = 0
        while self.phase is GenerationPhase.RUNNING and not self._stop_requested:
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.tick(dt)
            ticks += 1
        return self.history

    def stop(self) -> None:
        """Request the run loop to stop at the next tick boundary."""
        self._stop_requested = True

    def active_count(self) -> int:
        return sum(1 for g in self.population if self.environment.is_active(g.handle))

    # ------------------------------------------------------------------
    # Evaluation and selection
    # ------------------------------------------------------------------

    def evaluate(self) -> List[float]:
        """Reactivate every agent, read its telemetry and score it."""
        scores = []
        for genome in self.population:
            self.environment.reactivate(genome.handle)
            genome.telemetry = self.environment.telemetry(genome.handle)
            genome.fitness = self.fitness_fn(genome.telemetry)
            scores.append(genome.fitness)
            if logger.isEnabledFor(logging.DEBUG):
                terms = self.fitness_fn.breakdown(genome.telemetry)
                logger.debug(
                    f"Genome {genome.id}: fitness={genome.fitness:.3f} "
                    + ", ".join(f"{k}={v:.2f}" for k, v in terms.items())
                )
        return scores

    def rank(self) -> List[Genome]:
        """Genomes by fitness, best first; ties keep population order."""
        return sorted(self.population, key=lambda g: g.fitness, reverse=True)

    def build_next_generation(self, elite: List[Genome]) -> List[Genome]:
        """
        Breed population_size genomes from the elite pool.

        Args:
            elite: Top-ranked genomes, best first, with fitness assigned

        Returns:
            New genomes (not yet spawned)
        """
        c = self.config
        pool = [g.network for g in elite]
        pool_fitness = [g.fitness for g in elite]
        ids = {id(g.network): g.id for g in elite}

        offspring = []
        for i in range(c.population_size):
            network = self._new_network()

            if c.use_elitism and i < len(elite):
                network.copy_from(elite[i].network)
                offspring.append(Genome(
                    network=network, id=self._take_id(),
                    origin='elite', parent_ids=(elite[i].id,),
                ))
                continue

            parent = self.selector.select(pool, pool_fitness, self.generator)
            if c.reproduce_sexually:
                other = self.selector.select(pool, pool_fitness, self.generator)
                network.crossover(parent, other, self.generator)
                origin, parents = 'crossover', (ids[id(parent)], ids[id(other)])
            else:
                network.copy_from(parent)
                origin, parents = 'clone', (ids[id(parent)],)

            network.mutate(c.mutation_rate, c.mutation_strength, self.generator)
            offspring.append(Genome(
                network=network, id=self._take_id(),
                origin=origin, parent_ids=parents,
            ))

        return offspring

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _end_generation(self, active_at_end: int) -> None:
        self.phase = GenerationPhase.EVALUATING
        scores = self.evaluate()
        ranked = self.rank()
        elite = ranked[:self.elite_count]

        summary = self._record_summary(scores, elite, active_at_end)
        logger.info(
            f"Generation {summary.generation + 1} finished: "
            f"best={summary.best_fitness:.2f}, "
            f"mean={summary.mean_fitness:.2f} ± {summary.std_fitness:.2f}, "
            f"active={active_at_end}/{len(self.population)}, "
            f"time={summary.elapsed:.1f}s"
        )

        best = ranked[0]
        if self.best_genome is None or best.fitness > self.best_genome.fitness:
            self.best_genome = Genome(
                network=best.network.clone(), id=best.id, origin=best.origin,
                parent_ids=best.parent_ids, telemetry=best.telemetry,
                fitness=best.fitness,
            )

        self.state.generation += 1
        self.state.duration = self.duration_after(self.state.generation)
        self.state.elapsed = 0.0
        self.state.ticks = 0

        if self.state.generation > self.config.n_generations:
            self.phase = GenerationPhase.FINISHED
            logger.info("Evolution finished.")
            return

        next_population = self.build_next_generation(elite)
        self.environment.release([g.handle for g in self.population])
        self._spawn(next_population)
        self.phase = GenerationPhase.RUNNING

    def _record_summary(
        self,
        scores: List[float],
        elite: List[Genome],
        active_at_end: int,
    ) -> GenerationSummary:
        arr = np.asarray(scores, dtype=np.float64)
        summary = GenerationSummary(
            generation=self.state.generation,
            best_fitness=float(arr.max()),
            mean_fitness=float(arr.mean()),
            std_fitness=float(arr.std()),
            worst_fitness=float(arr.min()),
            duration=self.state.duration,
            elapsed=self.state.elapsed,
            ticks=self.state.ticks,
            active_at_end=active_at_end,
            elite_fitnesses=[g.fitness for g in elite],
        )
        self.history.append(summary)
        return summary

    def _spawn(self, population: List[Genome]) -> None:
        handles = self.environment.spawn(len(population), self.spawn_config)
        if len(handles) != len(population):
            raise RuntimeError(
                f"Environment spawned {len(handles)} agents for {len(population)} genomes"
            )
        for genome, handle in zip(population, handles):
            genome.handle = handle
        self.population = tuple(population)

    def _new_network(self) -> FeedForwardNetwork:
        return FeedForwardNetwork.from_config(self.config.network)

    def _take_id(self) -> int:
        next_id = self._next_id
        self._next_id += 1
        return next_id
