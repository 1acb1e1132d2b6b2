#!/usr/bin/env python3
"""
neuroracer Evolution CLI

Evolve feedforward controllers for a continuous-control gymnasium environment.

Examples:
    # Quick run on MountainCarContinuous
    python -m neuroracer --env mountaincar --preset quick

    # Load settings from YAML and override the population
    python -m neuroracer --config configs/run.yaml --population 40

    # Print configuration and exit
    python -m neuroracer --env pendulum --dry-run
"""

import argparse
import sys
import time

from .config import EvolutionConfig, PRESETS, get_preset
from .engine import GenerationManager
from .environment import AgentRegistry
from .errors import ConfigurationError
from .gym_adapter import get_env_name, make_gym_factory, network_config_for
from .utils import format_time, setup_logger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Evolve neural network controllers with a genetic algorithm',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Environment
    parser.add_argument(
        '--env',
        type=str,
        default='mountaincar',
        help='Gymnasium env id or short name (mountaincar, pendulum, lunarlander)'
    )

    # Configuration sources
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML configuration file'
    )
    parser.add_argument(
        '--preset',
        type=str,
        default='default',
        choices=sorted(PRESETS),
        help='Named preset (ignored when --config is given)'
    )

    # Evolution parameters
    parser.add_argument('--generations', '-g', type=int, default=None,
                        help='Maximum generation index')
    parser.add_argument('--population', '-p', type=int, default=None,
                        help='Population size')
    parser.add_argument('--mutation-rate', '-m', type=float, default=None,
                        help='Per-gene mutation probability (0-1)')
    parser.add_argument('--mutation-strength', '-s', type=float, default=None,
                        help='Scale of mutation perturbations')
    parser.add_argument('--elite-fraction', '-e', type=float, default=None,
                        help='Fraction of population kept as the parent pool')
    parser.add_argument('--asexual', action='store_true',
                        help='Clone a single parent instead of crossover')
    parser.add_argument('--no-elitism', action='store_true',
                        help='Do not copy elite networks unmutated')

    # Network
    parser.add_argument('--hidden-layers', type=int, default=None,
                        help='Number of hidden layers')
    parser.add_argument('--neurons', type=int, default=None,
                        help='Neurons per hidden layer')

    # Timing
    parser.add_argument('--dt', type=float, default=None,
                        help='Simulated seconds per tick; each tick is one env step')
    parser.add_argument('--duration', type=float, default=None,
                        help='Initial generation duration in seconds')
    parser.add_argument('--max-duration', type=float, default=None,
                        help='Maximum generation duration in seconds')

    # Misc
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--dry-run', action='store_true',
                        help='Print configuration and exit')

    return parser.parse_args(argv)


def build_config(args) -> EvolutionConfig:
    if args.config:
        config = EvolutionConfig.from_yaml(args.config)
    else:
        config = get_preset(args.preset)

    overrides = {
        'n_generations': args.generations,
        'population_size': args.population,
        'mutation_rate': args.mutation_rate,
        'mutation_strength': args.mutation_strength,
        'elite_fraction': args.elite_fraction,
        'generation_duration': args.duration,
        'max_generation_duration': args.max_duration,
        'seed': args.seed,
        'dt': args.dt,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    if args.asexual:
        config.reproduce_sexually = False
    if args.no_elitism:
        config.use_elitism = False

    config.network = network_config_for(
        args.env,
        args.hidden_layers if args.hidden_layers is not None else config.network.n_hidden_layers,
        args.neurons if args.neurons is not None else config.network.neurons_per_hidden_layer,
    )
    config.validate()
    return config


def print_config(config: EvolutionConfig, env_id: str):
    print("Evolution Configuration:")
    print(f"  Environment: {env_id}")
    print(f"  Generations: {config.n_generations}")
    print(f"  Population: {config.population_size}")
    print(f"  Elite Fraction: {config.elite_fraction}")
    print(f"  Mutation: rate={config.mutation_rate}, strength={config.mutation_strength}")
    print(f"  Reproduction: {'sexual' if config.reproduce_sexually else 'asexual'}, "
          f"elitism {'on' if config.use_elitism else 'off'}")
    print(f"  Duration: {config.generation_duration}s "
          f"(+{config.generation_duration_increase}s, max {config.max_generation_duration}s)")
    net = config.network
    print(f"  Network: {net.n_inputs} -> {net.n_hidden_layers}x{net.neurons_per_hidden_layer} "
          f"-> {net.n_outputs}")
    print(f"  Seed: {config.seed}")


def main(argv=None):
    args = parse_args(argv)
    logger = setup_logger('neuroracer', args.log_level)
    env_id = get_env_name(args.env)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.dry_run:
        print_config(config, env_id)
        return

    registry = AgentRegistry(make_gym_factory(env_id))
    manager = GenerationManager(config, registry, spawn_config=config.seed)

    start = time.time()
    try:
        manager.run()
    except KeyboardInterrupt:
        logger.warning("Interrupted; partial generation discarded")
    finally:
        registry.close()

    print(f"\n{'='*60}")
    print(f"Generations completed: {len(manager.history)}")
    print(f"Total time: {format_time(time.time() - start)}")
    if manager.best_genome is not None:
        best = manager.best_genome
        print(f"Best fitness: {best.fitness:.3f} (genome {best.id}, {best.origin})")
    print(f"{'='*60}")


if __name__ == '__main__':
    main()
