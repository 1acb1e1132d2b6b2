"""
Feedforward controller network evolved by the genetic algorithm.

Every layer (hidden and output) computes

    out[i] = tanh(bias[i] + sum_j in[j] * weight[i, j])

Weights are stored as ``nn.Linear.weight`` with shape (out, in), so the
row-major flattening matches ``weight[i * in_width + j]``. The network is
never trained by gradient descent; its genes change only through
randomization, crossover, mutation and copying.
"""

from typing import Iterator, List, Sequence, Tuple, Union

import numpy as np
import torch
import torch.nn as nn

from .errors import ConfigurationError, ShapeMismatch, TopologyMismatch
from .config import NetworkConfig


ObservationLike = Union[Sequence[float], np.ndarray, torch.Tensor]


class FeedForwardNetwork(nn.Module):
    """
    Fully connected tanh network with a fixed topology.

    Architecture:
        n_inputs -> [neurons_per_hidden_layer] * n_hidden_layers -> n_outputs
    """

    def __init__(
        self,
        n_inputs: int,
        n_outputs: int,
        n_hidden_layers: int,
        neurons_per_hidden_layer: int,
    ):
        super().__init__()
        dims = {
            'n_inputs': n_inputs,
            'n_outputs': n_outputs,
            'n_hidden_layers': n_hidden_layers,
            'neurons_per_hidden_layer': neurons_per_hidden_layer,
        }
        for name, value in dims.items():
            if value <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {value}")

        self.n_inputs = n_inputs
        self.n_outputs = n_outputs
        self.n_hidden_layers = n_hidden_layers
        self.neurons_per_hidden_layer = neurons_per_hidden_layer

        widths = [n_inputs] + [neurons_per_hidden_layer] * n_hidden_layers + [n_outputs]
        self.layers = nn.ModuleList(
            nn.Linear(widths[k], widths[k + 1]) for k in range(len(widths) - 1)
        )
        # Genes are zeroed until randomize/copy/crossover fills them
        for layer in self.layers:
            nn.init.zeros_(layer.weight)
            nn.init.zeros_(layer.bias)
        self.requires_grad_(False)

    @classmethod
    def from_config(cls, config: NetworkConfig) -> 'FeedForwardNetwork':
        return cls(
            config.n_inputs,
            config.n_outputs,
            config.n_hidden_layers,
            config.neurons_per_hidden_layer,
        )

    @property
    def topology(self) -> Tuple[int, int, int, int]:
        return (
            self.n_inputs,
            self.n_outputs,
            self.n_hidden_layers,
            self.neurons_per_hidden_layer,
        )

    def genes(self) -> Iterator[torch.Tensor]:
        """Yield gene buffers in a fixed order: per layer, weights then bias."""
        for layer in self.layers:
            yield layer.weight
            yield layer.bias

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        for layer in self.layers:
            x = torch.tanh(layer(x))
        return x

    def infer(self, observation: ObservationLike) -> torch.Tensor:
        """
        Compute the control vector for one observation.

        Args:
            observation: Sequence, array or tensor of exactly n_inputs values

        Returns:
            Tensor of n_outputs values in [-1, 1]

        Raises:
            ShapeMismatch: if the observation is not a flat vector of n_inputs values
        """
        x = torch.as_tensor(observation, dtype=torch.float32)
        if x.dim() != 1 or x.shape[0] != self.n_inputs:
            raise ShapeMismatch(self.n_inputs, tuple(x.shape))
        with torch.no_grad():
            return self.forward(x)

    # ------------------------------------------------------------------
    # Genetic operators
    # ------------------------------------------------------------------

    def randomize(self, generator: torch.Generator) -> None:
        """Fill every weight and bias uniformly in [-1, 1]."""
        for gene in self.genes():
            gene.uniform_(-1.0, 1.0, generator=generator)

    def crossover(
        self,
        parent_a: 'FeedForwardNetwork',
        parent_b: 'FeedForwardNetwork',
        generator: torch.Generator,
    ) -> None:
        """Uniform gene-wise crossover: each gene comes from a or b with p=0.5."""
        self._check_topology(parent_a)
        self._check_topology(parent_b)
        for gene, gene_a, gene_b in zip(self.genes(), parent_a.genes(), parent_b.genes()):
            take_a = torch.rand(gene.shape, generator=generator) < 0.5
            gene.copy_(torch.where(take_a, gene_a, gene_b))

    def mutate(self, rate: float, strength: float, generator: torch.Generator) -> None:
        """Perturb each gene with probability `rate` by U[-1, 1] * strength."""
        for gene in self.genes():
            mask = torch.rand(gene.shape, generator=generator) < rate
            noise = (torch.rand(gene.shape, generator=generator) * 2.0 - 1.0) * strength
            gene.add_(torch.where(mask, noise, torch.zeros_like(noise)))

    def copy_from(self, source: 'FeedForwardNetwork') -> None:
        """Overwrite all genes with the source network's values."""
        self._check_topology(source)
        for gene, src in zip(self.genes(), source.genes()):
            gene.copy_(src)

    def clone(self) -> 'FeedForwardNetwork':
        twin = FeedForwardNetwork(*self.topology)
        twin.copy_from(self)
        return twin

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def to_vector(self) -> torch.Tensor:
        """Flatten all genes into a single 1D tensor."""
        return torch.cat([gene.reshape(-1) for gene in self.genes()])

    @property
    def n_genes(self) -> int:
        """Number of weights and biases."""
        return sum(gene.numel() for gene in self.genes())

    def layer_shapes(self) -> List[Tuple[int, int]]:
        """(in_width, out_width) for each layer."""
        return [(layer.in_features, layer.out_features) for layer in self.layers]

    def _check_topology(self, other: 'FeedForwardNetwork') -> None:
        if self.layer_shapes() != other.layer_shapes():
            raise TopologyMismatch(
                f"Network topology {self.layer_shapes()} does not match {other.layer_shapes()}"
            )

    def __repr__(self) -> str:
        return (
            f"FeedForwardNetwork(inputs={self.n_inputs}, outputs={self.n_outputs}, "
            f"hidden={self.n_hidden_layers}x{self.neurons_per_hidden_layer})"
        )
