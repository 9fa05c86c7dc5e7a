"""Convolutional Restricted Boltzmann Machine.

The visible layer is an ``NV x NV`` field of binary units. The hidden layer is
made of ``K`` feature maps of ``NH x NH`` binary units; every unit of map ``k``
sees an ``NW x NW`` patch of the visible field through the shared kernel
``W[k]``, with ``NW = NV - NH + 1``.

The energy of a joint configuration is:

    E(v, h) = -sum_k sum_ij h[k, ij] (v * W[k])[ij] - sum_k b[k] sum_ij h[k, ij] - c sum_ij v[ij]

where ``*`` is the valid 2-D convolution, ``b`` are the per-map hidden biases
and ``c`` is the single visible bias.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import torch
import torch.nn.functional as F  # noqa: N812
from torch import Tensor, nn

from convrbm.core.config import ConvRBMConfig, TrainingConfig, UnitType
from convrbm.core.exceptions import SizeMismatchError, UnsupportedUnitTypeError
from convrbm.core.logging import log_duration
from convrbm.core.types import Dataset, Phase, TensorLike
from convrbm.models.base import LatentVariableModel
from convrbm.ops.activation import activate_binary, check_finite, sample_bernoulli
from convrbm.ops.convolution import (
    convolve2d_full,
    convolve2d_valid,
    correlate_filters,
)
from convrbm.training.callbacks import Callback
from convrbm.training.trainer import Trainer
from convrbm.utils.initialization import Initializer


class ConvRBM(LatentVariableModel):
    """Convolutional RBM with binary visible and hidden units.

    Besides its parameters the model keeps the state of the last
    reconstruction in buffers: ``v1`` (clamped input), ``h1_a``/``h1_s``
    (hidden layer from the input), ``v2_a``/``v2_s`` (reconstruction) and
    ``h2_a``/``h2_s`` (hidden layer from the reconstruction).

    Example:
        >>> config = ConvRBMConfig(visible_size=28, hidden_size=20, num_filters=8)
        >>> model = ConvRBM(config)
        >>> model.train(images, max_epochs=5)
        >>> model.reconstruct(images[0])
    """

    def __init__(
        self, config: ConvRBMConfig, generator: torch.Generator | None = None
    ):
        """Initialize the convolutional RBM.

        Args:
            config: Model configuration
            generator: Random generator used for sampling
        """
        for layer, unit in (("visible", config.visible_unit), ("hidden", config.hidden_unit)):
            if UnitType(unit) is not UnitType.BINARY:
                raise UnsupportedUnitTypeError(layer, UnitType(unit).value)

        self.visible_size = config.visible_size
        self.hidden_size = config.hidden_size
        self.kernel_size = config.kernel_size
        self.num_filters = config.num_filters
        self.visible_unit = config.visible_unit
        self.hidden_unit = config.hidden_unit

        self.learning_rate = config.learning_rate
        self.momentum = config.momentum
        self.l2_weight = config.l2_weight

        super().__init__(config, generator)

    @property
    def num_visible(self) -> int:
        """Number of visible units."""
        return self.visible_size * self.visible_size

    @property
    def num_hidden(self) -> int:
        """Number of hidden units per feature map."""
        return self.hidden_size * self.hidden_size

    @property
    def visible_shape(self) -> tuple[int, int]:
        """Shape of the visible field."""
        return (self.visible_size, self.visible_size)

    @property
    def hidden_shape(self) -> tuple[int, int, int]:
        """Shape of the stack of feature maps."""
        return (self.num_filters, self.hidden_size, self.hidden_size)

    def _build_model(self) -> None:
        """Create the filter bank, biases and reconstruction buffers."""
        k, nw = self.num_filters, self.kernel_size

        # updated by contrastive divergence, not autograd
        self.W = nn.Parameter(torch.empty(k, nw, nw), requires_grad=False)
        self.hbias = nn.Parameter(torch.empty(k), requires_grad=False)
        self.vbias = nn.Parameter(torch.empty(()), requires_grad=False)

        Initializer(self.config.weight_init)(self.W)
        Initializer(self.config.bias_init)(self.hbias)
        Initializer(self.config.bias_init)(self.vbias)

        for name in ("v1", "v2_a", "v2_s"):
            self.register_buffer(name, torch.zeros(self.visible_shape))
        for name in ("h1_a", "h1_s", "h2_a", "h2_s"):
            self.register_buffer(name, torch.zeros(self.hidden_shape))

    def _visible_batch(self, v: TensorLike) -> tuple[Tensor, bool]:
        """Reshape visible input to ``(B, NV, NV)`` and report if it was batched."""
        v = self.prepare_input(v)
        if v.dim() in (2, 3) and v.shape[-2:] == self.visible_shape:
            batched = v.dim() == 3
        elif v.dim() in (1, 2) and v.shape[-1] == self.num_visible:
            batched = v.dim() == 2
        else:
            raise SizeMismatchError(
                "Visible layer shape",
                f"(..., {self.visible_size}, {self.visible_size}) "
                f"or (..., {self.num_visible})",
                tuple(v.shape),
            )
        return v.reshape(-1, *self.visible_shape), batched

    def _hidden_batch(self, h: TensorLike) -> tuple[Tensor, bool]:
        """Reshape hidden input to ``(B, K, NH, NH)`` and report if it was batched."""
        h = self.prepare_input(h)
        if h.dim() not in (3, 4) or h.shape[-3:] != self.hidden_shape:
            raise SizeMismatchError(
                "Hidden layer shape", f"(..., {', '.join(map(str, self.hidden_shape))})",
                tuple(h.shape),
            )
        return h.reshape(-1, *self.hidden_shape), h.dim() == 4

    @torch.no_grad()
    def activate_hidden(self, v_a: Tensor, v_s: Tensor | None = None) -> Phase:
        """Compute feature map probabilities and samples.

        Each map ``k`` receives the visible probabilities convolved with
        ``W[k]`` plus ``hbias[k]``. The visible samples are not used; they are
        accepted so both activations share the same calling convention.

        Args:
            v_a: Visible probabilities, ``(NV, NV)``, ``(NV*NV,)`` or batched
            v_s: Visible samples (unused)

        Returns
        -------
            Tuple of (probabilities, samples) shaped ``(K, NH, NH)``, with a
            leading batch dimension if the input had one
        """
        v, batched = self._visible_batch(v_a)
        pre = convolve2d_valid(v, self.W) + self.hbias.view(1, -1, 1, 1)
        check_finite("hidden pre-activation", pre)

        h_a, h_s = activate_binary(pre, self.hidden_unit, "hidden", self.generator)
        if batched:
            return h_a, h_s
        return h_a[0], h_s[0]

    @torch.no_grad()
    def activate_visible(self, h_a: Tensor, h_s: Tensor) -> Phase:
        """Compute visible probabilities and samples.

        Every feature map's samples are projected back through its own kernel,
        the ``K`` contributions are summed and ``vbias`` is added.

        Args:
            h_a: Hidden probabilities (unused)
            h_s: Hidden samples, ``(K, NH, NH)`` or batched

        Returns
        -------
            Tuple of (probabilities, samples) shaped ``(NV, NV)``, with a
            leading batch dimension if the input had one
        """
        h, batched = self._hidden_batch(h_s)
        contributions = convolve2d_full(h, self.W)
        pre = contributions.sum(dim=1) + self.vbias
        check_finite("visible pre-activation", pre)

        v_a, v_s = activate_binary(pre, self.visible_unit, "visible", self.generator)
        if batched:
            return v_a, v_s
        return v_a[0], v_s[0]

    @torch.no_grad()
    def reconstruct(self, sample: TensorLike) -> Tensor:
        """Run one up-down-up pass on a single sample and store every layer.

        Args:
            sample: ``NV*NV`` values, flat or as an ``NV x NV`` grid

        Returns
        -------
            The reconstructed visible probabilities (``v2_a``)

        Raises
        ------
            SizeMismatchError: If the sample does not hold ``NV*NV`` values.
                No buffer is modified in that case.
        """
        sample = self.prepare_input(sample)
        if sample.numel() != self.num_visible:
            raise SizeMismatchError(
                "Reconstruction sample", self.num_visible, sample.numel()
            )
        v1 = sample.reshape(self.visible_shape)

        with log_duration(self.logger, "Reconstruction completed", num_visible=self.num_visible):
            h1_a, h1_s = self.activate_hidden(v1)
            v2_a, v2_s = self.activate_visible(h1_a, h1_s)
            h2_a, h2_s = self.activate_hidden(v2_a, v2_s)

        for name, value in (
            ("v1", v1), ("h1_a", h1_a), ("h1_s", h1_s),
            ("v2_a", v2_a), ("v2_s", v2_s), ("h2_a", h2_a), ("h2_s", h2_s),
        ):
            getattr(self, name).copy_(value)

        return self.v2_a

    def train(  # type: ignore[override]
        self,
        dataset: Dataset | bool = True,
        max_epochs: int | None = None,
        config: TrainingConfig | None = None,
        callbacks: Sequence[Callback] | None = None,
    ) -> Any:
        """Train the model with contrastive divergence.

        Called with a boolean, this is ``nn.Module.train(mode)`` so that
        ``eval()`` keeps working.

        Args:
            dataset: Samples holding ``NV*NV`` values each
            max_epochs: Number of passes over the dataset; defaults to
                ``config.epochs``
            config: Training configuration
            callbacks: Extra training callbacks

        Returns
        -------
            Training history as returned by :meth:`Trainer.fit`
        """
        if isinstance(dataset, bool):
            return super().train(dataset)

        return Trainer(self, config, callbacks).fit(dataset, num_epochs=max_epochs)

    def energy(self, visible: Tensor, hidden: Tensor) -> Tensor:
        """Compute the joint energy ``E(v, h)``.

        Args:
            visible: Visible configurations, single or batched
            hidden: Feature map configurations, single or batched

        Returns
        -------
            Energy per configuration
        """
        v, batched = self._visible_batch(visible)
        h, _ = self._hidden_batch(hidden)

        interaction = (h * convolve2d_valid(v, self.W)).sum(dim=(1, 2, 3))
        hidden_term = (h.sum(dim=(2, 3)) * self.hbias).sum(dim=1)
        visible_term = self.vbias * v.sum(dim=(1, 2))

        energy = -(interaction + hidden_term + visible_term)
        return energy if batched else energy[0]

    @torch.no_grad()
    def free_energy(self, visible: Tensor) -> Tensor:
        """Compute ``F(v) = -log sum_h exp(-E(v, h))``.

        Args:
            visible: Visible configurations, single or batched

        Returns
        -------
            Free energy per configuration
        """
        v, batched = self._visible_batch(visible)
        pre = convolve2d_valid(v, self.W) + self.hbias.view(1, -1, 1, 1)

        free_energy = -self.vbias * v.sum(dim=(1, 2)) - F.softplus(pre).sum(dim=(1, 2, 3))
        return free_energy if batched else free_energy[0]

    @torch.no_grad()
    def gradient_statistics(
        self, v_pos: Tensor, h_pos: Tensor, v_neg: Tensor, h_neg: Tensor
    ) -> dict[str, Tensor]:
        """Compute batch-averaged contrastive divergence statistics.

        Args:
            v_pos: Visible data of the positive phase
            h_pos: Hidden probabilities of the positive phase
            v_neg: Visible probabilities of the negative phase
            h_neg: Hidden probabilities of the negative phase

        Returns
        -------
            Update direction per parameter name, including the L2 penalty
        """
        v_pos, _ = self._visible_batch(v_pos)
        v_neg, _ = self._visible_batch(v_neg)
        h_pos, _ = self._hidden_batch(h_pos)
        h_neg, _ = self._hidden_batch(h_neg)
        if v_pos.shape[0] != h_pos.shape[0] or v_neg.shape[0] != h_neg.shape[0]:
            raise SizeMismatchError(
                "Batch sizes of the phases",
                (v_pos.shape[0], v_neg.shape[0]),
                (h_pos.shape[0], h_neg.shape[0]),
            )

        W_grad = (
            correlate_filters(v_pos, h_pos) / v_pos.shape[0]
            - correlate_filters(v_neg, h_neg) / v_neg.shape[0]
        )
        if self.l2_weight > 0:
            W_grad = W_grad - self.l2_weight * self.W

        return {
            "W": W_grad,
            "hbias": h_pos.sum(dim=(2, 3)).mean(dim=0) - h_neg.sum(dim=(2, 3)).mean(dim=0),
            "vbias": v_pos.sum(dim=(1, 2)).mean() - v_neg.sum(dim=(1, 2)).mean(),
        }

    @torch.no_grad()
    def sample_fantasy_particles(
        self, num_samples: int = 1, num_steps: int = 1000
    ) -> Tensor:
        """Run Gibbs chains from uniformly random visible states.

        Args:
            num_samples: Number of independent chains
            num_steps: Gibbs steps per chain

        Returns
        -------
            Final visible samples of shape ``(num_samples, NV, NV)``
        """
        half = torch.full(
            (num_samples, *self.visible_shape), 0.5, dtype=self.dtype, device=self.device
        )
        v_a = v_s = sample_bernoulli(half, self.generator)

        for _ in range(num_steps):
            v_a, v_s = self.gibbs_step(v_a, v_s)

        return v_s
