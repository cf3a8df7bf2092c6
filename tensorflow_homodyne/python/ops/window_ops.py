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
"""Weighting filters for homodyne reconstruction."""

import collections
import enum

import tensorflow as tf

from tensorflow_homodyne.python.util import api_util
from tensorflow_homodyne.python.util import check_util
from tensorflow_homodyne.python.util import errors


@api_util.export("signal.Window")
class Window(enum.Enum):
  """Shape of the transition of the homodyne high-pass filter.

  The transition region is the symmetric part of *k*-space, where both a
  sample and its conjugate-symmetric counterpart were acquired. Across it, the
  filter goes from 2 (asymmetric sampled region) to 0 (unsampled region).

  * `STEP`: constant 1 across the transition. Best SNR.
  * `LINEAR`: linear ramp. Alias: `"ramp"`.
  * `QUADRATIC`: odd-symmetric quadratic. Alias: `"quad"`.
  * `CUBIC`: cubic. Alias: `"cube"`. This is the default.
  * `QUARTIC`: odd-symmetric quartic.

  Smoother windows have a flatter profile near the centre of *k*-space, which
  mitigates Gibbs artifacts.
  """
  STEP = 'step'
  LINEAR = 'linear'
  QUADRATIC = 'quadratic'
  CUBIC = 'cubic'
  QUARTIC = 'quartic'


_WINDOW_ALIASES = {
    'ramp': Window.LINEAR,
    'quad': Window.QUADRATIC,
    'cube': Window.CUBIC
}


# Each window maps a ramp `r`, which goes from 2 to 0 (or 0 to 2) and is odd
# about 1, to the filter values.
_WINDOW_FUNCTIONS = {
    Window.STEP: tf.ones_like,
    Window.LINEAR: lambda r: r,
    Window.QUADRATIC: lambda r: (r - 1.0) ** 2 * tf.math.sign(r - 1.0) + 1.0,
    Window.CUBIC: lambda r: (r - 1.0) ** 3 + 1.0,
    Window.QUARTIC: lambda r: (r - 1.0) ** 4 * tf.math.sign(r - 1.0) + 1.0
}


HomodyneFilters = collections.namedtuple(
    'HomodyneFilters', ['high_pass', 'low_pass', 'axis'])
HomodyneFilters.__doc__ = """Filters used by homodyne reconstruction.

Attributes:
  high_pass: A real 1D `Tensor`. The data weighting filter, with values in
    `[0, 2]`.
  low_pass: A real 1D `Tensor`. The phase estimation filter, with values in
    `[0, 1]`.
  axis: An `int`. The axis along which the filters are applied.
"""


def validate_window(window):
  """Returns the `Window` member for `window`.

  Args:
    window: A `Window` or one of its names, including aliases.

  Returns:
    A `Window`.

  Raises:
    ConfigError: If `window` is not recognized.
  """
  return check_util.validate_enum(window, Window, name='window',
                                  aliases=_WINDOW_ALIASES)


@api_util.export("signal.homodyne_filters")
def homodyne_filters(indices, size, window='cube', axis=0, dtype=tf.float32):
  """Computes the high-pass and low-pass filters for homodyne reconstruction.

  The high-pass filter `H` weights the measured data so that, for each pair of
  conjugate-symmetric locations, the weights add to 2. It is 2 where only one
  of the pair was sampled, 0 where neither was sampled and follows `window`
  across the symmetric region (padded by one sample on each side). The
  low-pass filter `L = sqrt(max(0, 1 - (H - 1) ** 2))` is non-zero only
  across the symmetric region and is used to estimate the phase.

  Args:
    indices: A 1D integer `Tensor`. The contiguous positions sampled along the
      partially sampled axis.
    size: An `int`. The length of the partially sampled axis.
    window: A `Window` or a `string`. The transition shape. One of `"step"`,
      `"linear"` (or `"ramp"`), `"quadratic"` (or `"quad"`), `"cubic"`
      (or `"cube"`) or `"quartic"`. Defaults to `"cube"`.
    axis: An `int`. The axis the filters refer to. Only recorded in the
      output.
    dtype: A floating point `tf.DType`. The filters' type.

  Returns:
    A `HomodyneFilters`.

  Raises:
    ConfigError: If `window` is not recognized.
    SamplingError: If sampling has no symmetric region, or if the symmetric
      region extends over the whole axis.
  """
  window = validate_window(window)
  indices = tf.cast(indices, tf.int64)

  high_pass = tf.scatter_nd(indices[:, tf.newaxis],
                            tf.ones(tf.shape(indices), dtype=dtype),
                            tf.constant([size], dtype=tf.int64))
  # Reflect: 2 where a point was sampled but its mirror was not, and 0 in the
  # converse case. Pairs where both or neither were sampled give 1.
  high_pass = high_pass + tf.reverse(1.0 - high_pass, axis=[0])

  center = tf.where(tf.math.equal(high_pass, 1.0))[:, 0]
  if tf.size(center) == 0:
    raise errors.SamplingError(
        "k-space has no symmetric region along the partially sampled axis")
  # Pad by one point on each side.
  first, last = int(center[0]) - 1, int(center[-1]) + 1
  if first < 0 or last >= size:
    raise errors.SamplingError(
        "k-space sampling is not asymmetric along the partially sampled axis")
  center = tf.range(first, last + 1, dtype=tf.int64)

  # Symmetric points of the ramp add up to 2.
  ramp = tf.linspace(high_pass[first], high_pass[last], tf.size(center))
  high_pass = tf.tensor_scatter_nd_update(
      high_pass, center[:, tf.newaxis], _WINDOW_FUNCTIONS[window](ramp))

  low_pass = tf.math.sqrt(
      tf.math.maximum(1.0 - (high_pass - 1.0) ** 2, 0.0))

  return HomodyneFilters(high_pass=high_pass, low_pass=low_pass, axis=axis)


def expand_filter(values, axis, rank):
  """Reshapes a 1D filter so that it broadcasts along `axis`.

  Args:
    values: A 1D `Tensor`.
    axis: An `int`. The axis the filter applies to.
    rank: An `int`. The rank of the tensor the filter will multiply.

  Returns:
    A `Tensor` of rank `rank` whose only non-singleton axis is `axis`.
  """
  shape = [1] * rank
  shape[axis] = -1
  return tf.reshape(values, shape)
