# Copyright 2021 University College London. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Detection of partial Fourier sampling patterns.

Partially sampled *k*-space is represented zero-filled: any location whose
value is exactly zero is treated as not acquired. The operations in this
module recover the sampled region from that representation and check that it
is usable for partial Fourier reconstruction.
"""

import collections

from absl import logging
import tensorflow as tf

from tensorflow_homodyne.python.util import api_util
from tensorflow_homodyne.python.util import errors


# An axis with a sampling fraction above this is considered fully sampled.
FULLY_SAMPLED_THRESHOLD = 0.98


SamplingInfo = collections.namedtuple(
    'SamplingInfo', ['mask', 'fractions', 'indices', 'axis'])
SamplingInfo.__doc__ = """Description of a partial Fourier sampling pattern.

Attributes:
  mask: A boolean `Tensor` with the same shape as the spatial *k*-space. `True`
    for sampled locations.
  fractions: A `tuple` of `floats`. The fraction of sampled lines along each
    spatial axis. Has length 2 for 2D data (including 3D data with a
    singleton third axis) and 3 for 3D data.
  indices: A `tuple` of 1D `int64` tensors, one per spatial axis, with the
    sorted positions sampled along that axis.
  axis: An `int`. The partially sampled axis, i.e. the axis with the smallest
    sampling fraction.
"""


@api_util.export("sampling.canonicalize_kspace")
def canonicalize_kspace(kspace):
  """Validates single-coil *k*-space and removes its channel axis.

  Args:
    kspace: A complex `Tensor` of shape `[nx, ny]`, `[nx, ny, nz]` or
      `[nx, ny, nz, nc]`, where `nc` must be 1.

  Returns:
    A complex `Tensor` of shape `[nx, ny]` or `[nx, ny, nz]`.

  Raises:
    TypeError: If `kspace` is not complex.
    InputShapeError: If `kspace` has more than one channel, has a singleton
      `nx` or `ny` or is not 2D or 3D.
  """
  kspace = tf.convert_to_tensor(kspace)
  if not kspace.dtype.is_complex:
    raise TypeError(
        f"`kspace` must be of a complex dtype, but got: {kspace.dtype}")

  shape = kspace.shape.as_list()
  if len(shape) == 4:
    if shape[3] != 1:
      raise errors.InputShapeError(
          f"Only single-coil k-space is supported, but got {shape[3]} "
          f"channels in k-space of shape {shape}")
    kspace = kspace[..., 0]
    shape = shape[:3]
  if len(shape) not in (2, 3):
    raise errors.InputShapeError(
        f"Only 2D or 3D k-space is supported, but got shape: {shape}")
  if shape[0] == 1 or shape[1] == 1:
    raise errors.InputShapeError(
        f"Only 2D or 3D k-space is supported, but got shape: {shape}")
  return kspace


@api_util.export("sampling.detect_partial_sampling")
def detect_partial_sampling(kspace):
  """Detects the partially sampled axis of zero-filled *k*-space.

  For each spatial axis, the sampling mask `kspace != 0` is reduced with a
  logical OR over the remaining axes. The positions where the result is `True`
  are the lines sampled along that axis. The partially sampled axis is the one
  with the smallest fraction of sampled lines (the first one, on ties).

  Logs the sampling fractions and the selected axis at `INFO` level.

  Args:
    kspace: A complex `Tensor`. The zero-filled *k*-space. See
      `canonicalize_kspace` for the supported shapes.

  Returns:
    A `SamplingInfo`.

  Raises:
    InputShapeError: If `kspace` does not have a supported shape.
    SamplingError: If `kspace` has no sampled values or if the sampled lines
      are not contiguous along some axis.
    FullySampledError: If the sampling fraction exceeds
      `FULLY_SAMPLED_THRESHOLD` along every axis.
  """
  kspace = canonicalize_kspace(kspace)
  mask = tf.math.not_equal(kspace, tf.constant(0, dtype=kspace.dtype))
  if not tf.math.reduce_any(mask):
    raise errors.SamplingError("k-space contains no samples")

  shape = kspace.shape.as_list()
  rank = len(shape)
  indices = []
  for axis in range(rank):
    other_axes = [ax for ax in range(rank) if ax != axis]
    occupied = tf.math.reduce_any(mask, axis=other_axes)
    axis_indices = tf.where(occupied)[:, 0]
    steps = axis_indices[1:] - axis_indices[:-1]
    if tf.math.reduce_any(tf.math.not_equal(steps, 1)):
      raise errors.SamplingError(
          f"k-space not centered or not contiguous along axis {axis}")
    indices.append(axis_indices)

  # A singleton third axis is not a sampling dimension.
  num_axes = 3 if rank == 3 and shape[2] > 1 else 2
  fractions = tuple(int(tf.size(indices[axis])) / shape[axis]
                    for axis in range(num_axes))
  axis = fractions.index(min(fractions))

  logging.info("Partial sampling: [%s]. Using axis %d.",
               " ".join(f"{f:.2f}" for f in fractions), axis)

  if all(f > FULLY_SAMPLED_THRESHOLD for f in fractions):
    raise errors.FullySampledError(
        "k-space is fully sampled, no need for partial Fourier "
        f"reconstruction (sampling fractions: {fractions})")

  return SamplingInfo(mask=mask,
                      fractions=fractions,
                      indices=tuple(indices),
                      axis=axis)
