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
"""Fast Fourier transform operations."""

import numpy as np
import tensorflow as tf

from tensorflow_homodyne.python.util import api_util
from tensorflow_homodyne.python.util import check_util


@api_util.export("signal.fft")
def fftn(x, axes=None, norm='backward', shift=False):
  """Compute the N-dimensional discrete Fourier Transform.

  This function computes the `N`-dimensional discrete Fourier Transform over any
  number of axes in an `M`-dimensional array by means of the Fast Fourier
  Transform (FFT).

  .. note::
    `N` must be 1, 2 or 3.

  Args:
    x: A `Tensor`. Must be one of the following types: `complex64`,
      `complex128`. Must have known static rank.
    axes: An `int` or a list of `ints`. Axes over which to compute the FFT. If
      not given, all axes are used.
    norm: A `string`. The normalization mode. Must be one of `"forward"`,
      `"backward"` or `"ortho"`. Defaults to `"backward"`. Indicates which
      direction of the forward/backward pair of transforms is scaled and with
      what normalization factor.
    shift: A `bool`. If `True`, perform a "centered" transform by appropriately
      shifting the inputs/outputs (eg, shifting zero-frequency components to the
      center of the spectrum).

  Returns:
    The input tensor, transformed along the axes indicated by `axes`.

  Raises:
    TypeError: If `x` is not of a complex type.
    ValueError: If `axes` is invalid or has more than 3 elements.
    ConfigError: If `norm` is not one of 'forward', 'backward' or 'ortho'.
  """
  return _fft_internal(x, axes, norm, shift, 'forward')


@api_util.export("signal.ifft")
def ifftn(x, axes=None, norm='backward', shift=False):
  """Compute the N-dimensional inverse discrete Fourier Transform.

  This function computes the inverse of the `N`-dimensional discrete Fourier
  Transform over any number of axes in an M-dimensional array by means of
  the Fast Fourier Transform (FFT).

  .. note::
    `N` must be 1, 2 or 3.

  Args:
    x: A `Tensor`. Must be one of the following types: `complex64`,
      `complex128`. Must have known static rank.
    axes: An `int` or a list of `ints`. Axes over which to compute the FFT. If
      not given, all axes are used.
    norm: A `string`. The normalization mode. Must be one of `"forward"`,
      `"backward"` or `"ortho"`. Defaults to `"backward"`.
    shift: A `bool`. If `True`, perform a "centered" transform by appropriately
      shifting the inputs/outputs.

  Returns:
    The input tensor, inverse transformed along the axes indicated by `axes`.

  Raises:
    TypeError: If `x` is not of a complex type.
    ValueError: If `axes` is invalid or has more than 3 elements.
    ConfigError: If `norm` is not one of 'forward', 'backward' or 'ortho'.
  """
  return _fft_internal(x, axes, norm, shift, 'backward')


_FFT_OPS = {
    'forward': {1: tf.signal.fft, 2: tf.signal.fft2d, 3: tf.signal.fft3d},
    'backward': {1: tf.signal.ifft, 2: tf.signal.ifft2d, 3: tf.signal.ifft3d}
}


def _fft_internal(x, axes, norm, shift, transform):
  """Compute the N-dimensional (inverse) discrete Fourier Transform.

  Args:
    transform: Transform to compute. One of {'forward', 'backward'}.

  For the other parameters, see `fftn` and `ifftn`.

  Returns:
    See `fftn` and `ifftn`.

  Raises:
    See `fftn` and `ifftn`.
  """
  x = tf.convert_to_tensor(x)
  if not x.dtype.is_complex:
    raise TypeError((
      "Invalid FFT input: `x` must be of a complex dtype. "
      "Received: {}").format(x.dtype))
  rank = x.shape.rank
  if rank is None:
    raise ValueError("Invalid FFT input: `x` must have known static rank.")

  if axes is None:
    axes = list(range(rank))
  axes = check_util.validate_axis(axes, rank=rank, min_length=1,
                                  max_length=3, canonicalize='positive')
  norm = check_util.validate_enum(
      norm, {'forward', 'backward', 'ortho'}, name='norm')

  # Normalization factor.
  if norm == 'backward':
    norm_factor = tf.constant(1, x.dtype)
  else:
    norm_factor = tf.cast(
        tf.math.reduce_prod(tf.gather(tf.shape(x), axes)), x.dtype)
    if norm == 'ortho':
      norm_factor = tf.math.sqrt(norm_factor)

  # Apply input domain FFT shift.
  if shift:
    x = tf.signal.ifftshift(x, axes=axes)

  # Move op dimensions to the end, as required by the `tf.signal` kernels.
  perm = [ax for ax in range(rank) if ax not in axes] + axes
  perform_transpose = perm != list(range(rank))
  if perform_transpose:
    x = tf.transpose(x, perm=perm)

  x = _FFT_OPS[transform][len(axes)](x)
  if transform == 'forward':
    x = x / norm_factor
  else:
    x = x * norm_factor

  # Undo transpose.
  if perform_transpose:
    x = tf.transpose(x, perm=np.argsort(perm).tolist())

  # Apply output domain FFT shift.
  if shift:
    x = tf.signal.fftshift(x, axes=axes)

  return x
