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
"""Partial Fourier reconstruction.

Reconstruction operators accept zero-filled, partially sampled *k*-space and
return a real image together with the low resolution phase map used to
constrain the reconstruction.

*k*-space is stored with the zero frequency at the centre of each axis.
Internally, images are computed in the natural FFT layout and both outputs are
centre-shifted once at the end.
"""

import collections
import enum
import numbers

import numpy as np
import tensorflow as tf

from tensorflow_homodyne.python.linalg import conjugate_gradient
from tensorflow_homodyne.python.linalg import linear_operator_phase_constraint
from tensorflow_homodyne.python.ops import fft_ops
from tensorflow_homodyne.python.ops import sampling_ops
from tensorflow_homodyne.python.ops import window_ops
from tensorflow_homodyne.python.util import api_util
from tensorflow_homodyne.python.util import check_util


@api_util.export("recon.Method")
class Method(enum.Enum):
  """Partial Fourier reconstruction method.

  * `HOMODYNE`: homodyne detection [1]. Direct, non-iterative.
  * `POCS`: projection onto convex sets [2]. Alternates between the phase
    constraint and data consistency for a fixed number of iterations.
  * `LEAST_SQUARES`: phase-constrained least squares [3]. The phase
    constraint is a soft penalty on the imaginary part of the demodulated
    image. Aliases: `"lstsq"`, `"least_squares"`.
  * `ZEROFILL`: magnitude of the zero-filled reconstruction. Does not use the
    phase and is mostly useful as a baseline.

  References:
    .. [1] Noll, D. C., Nishimura, D. G., & Macovski, A. (1991). Homodyne
      detection in magnetic resonance imaging. IEEE transactions on medical
      imaging, 10(2), 154-163.
    .. [2] Haacke, E. M., Lindskogj, E. D., & Lin, W. (1991). A fast, iterative,
      partial-Fourier technique capable of local phase recovery. Journal of
      Magnetic Resonance (1969), 92(1), 126-145.
    .. [3] Bydder, M., & Robson, M. D. (2005). Partial Fourier partially
      parallel imaging. Magnetic Resonance in Medicine, 53(6), 1393-1401.
  """
  HOMODYNE = 'homodyne'
  POCS = 'pocs'
  LEAST_SQUARES = 'least-squares'
  ZEROFILL = 'zerofill'


_METHOD_ALIASES = {
    'lstsq': Method.LEAST_SQUARES,
    'least_squares': Method.LEAST_SQUARES
}


@api_util.export("recon.homodyne", "recon.partial_fourier")
def reconstruct_homodyne(kspace,
                         method='homodyne',
                         window='cube',
                         preserve_phase=False,
                         smooth_phase=False,
                         max_iter=10,
                         regularization=1e-2,
                         damping=1e-4,
                         tol=1e-6,
                         name=None):
  """Reconstructs an MR image from partial Fourier *k*-space.

  The partially sampled axis is detected automatically from the zero-filled
  input: unsampled locations must be exactly zero and the sampled region must
  be a single contiguous block along each axis, covering the centre of
  *k*-space. A weighting filter and a low-pass filter are built along the
  partially sampled axis (see `tfhd.signal.homodyne_filters`), a low
  resolution phase map is estimated from the symmetric part of *k*-space and
  then used by the selected method to recover a real image.

  ```{note}
  This function inspects the values of `kspace` to detect the sampling pattern
  and must be run eagerly.
  ```

  Args:
    kspace: A `Tensor`. The zero-filled *k*-space data. Must have type
      `complex64` or `complex128`. Must have shape `[nx, ny]`, `[nx, ny, nz]`
      or `[nx, ny, nz, 1]`, with the zero frequency at the centre of each axis.
    method: A `Method` or a `string`. The partial Fourier reconstruction
      algorithm. Must be one of `"homodyne"`, `"pocs"`, `"least-squares"` or
      `"zerofill"`. Defaults to `"homodyne"`.
    window: A `Window` or a `string`. The transition shape of the weighting
      filter. Must be one of `"step"`, `"linear"` (or `"ramp"`), `"quadratic"`
      (or `"quad"`), `"cubic"` (or `"cube"`) or `"quartic"`. Defaults to
      `"cube"`.
    preserve_phase: A `boolean`. If `True`, the output image is complex and
      carries the estimated low resolution phase. Defaults to `False`.
    smooth_phase: A `boolean`. If `True`, additionally apodizes the *k*-space
      used for phase estimation with a sine window along the in-plane axes
      (the first two) other than the partially sampled one. Defaults to
      `False`.
    max_iter: An integer. The number of iterations of the `"pocs"` and
      `"least-squares"` methods. Defaults to 10.
    regularization: A `float`. The weight of the penalty on the imaginary part
      of the demodulated image for `"least-squares"`. Defaults to `1e-2`.
    damping: A `float`. The Tikhonov damping for `"least-squares"`. Defaults to
      `1e-4`.
    tol: A `float`. The relative residual tolerance of the conjugate gradient
      solver for `"least-squares"`. Defaults to `1e-6`.
    name: A name for this op.

  Returns:
    A tuple `(image, phase)`.

    * `image`: A `Tensor` with the spatial shape of `kspace`. Has type
      `kspace.dtype.real_dtype`, or `kspace.dtype` if `preserve_phase` is
      `True`.
    * `phase`: A real `Tensor` with the spatial shape of `kspace`. The low
      resolution phase map, in radians.

  Raises:
    TypeError: If `kspace` is not complex.
    InputShapeError: If `kspace` is not single-coil 2D or 3D data.
    SamplingError: If the sampled region is not contiguous or has no
      asymmetric part.
    FullySampledError: If `kspace` is fully sampled.
    ConfigError: If `method` or `window` are not recognized, or if `max_iter`
      is not positive.
  """
  with tf.name_scope(name or 'reconstruct_homodyne'):
    method = check_util.validate_enum(method, Method, name='method',
                                      aliases=_METHOD_ALIASES)
    window = window_ops.validate_window(window)
    check_util.validate_type(max_iter, numbers.Integral, name='max_iter')
    check_util.validate_positive(max_iter, name='max_iter')
    max_iter = int(max_iter)

    kspace = sampling_ops.canonicalize_kspace(kspace)
    sampling = sampling_ops.detect_partial_sampling(kspace)

    filters = window_ops.homodyne_filters(
        sampling.indices[sampling.axis],
        kspace.shape[sampling.axis],
        window=window,
        axis=sampling.axis,
        dtype=kspace.dtype.real_dtype)

    phase = estimate_phase(kspace, filters.low_pass, sampling.axis,
                           smooth_phase=smooth_phase)

    func = {Method.HOMODYNE: _homodyne,
            Method.POCS: _pocs,
            Method.LEAST_SQUARES: _least_squares,
            Method.ZEROFILL: _zerofill}

    image = func[method](kspace,
                         phase=phase,
                         mask=sampling.mask,
                         high_pass=filters.high_pass,
                         axis=sampling.axis,
                         max_iter=max_iter,
                         regularization=regularization,
                         damping=damping,
                         tol=tol)

    # Raw data are stored centre-shifted.
    image = tf.signal.fftshift(image)
    phase = tf.signal.fftshift(phase)

    if preserve_phase:
      image = tf.cast(image, kspace.dtype) * _phase_modulator(phase)

    return image, phase


@api_util.export("recon.estimate_phase")
def estimate_phase(kspace, low_pass, axis, smooth_phase=False):
  """Estimates the low resolution phase of partial Fourier *k*-space.

  The phase is the angle of the image reconstructed from `kspace` weighted by
  `low_pass` along `axis`.

  Args:
    kspace: A complex `Tensor` of shape `[nx, ny]` or `[nx, ny, nz]`, with the
      zero frequency at the centre of each axis.
    low_pass: A real 1D `Tensor`. The low-pass filter along `axis`, e.g. from
      `tfhd.signal.homodyne_filters`.
    axis: An `int`. The partially sampled axis.
    smooth_phase: A `boolean`. If `True`, also apply a sine window along the
      in-plane axes other than `axis`. Defaults to `False`.

  Returns:
    A real `Tensor` with the same shape as `kspace`, in the natural (not
    centre-shifted) image layout. The phase in radians, in `(-pi, pi]`.
  """
  kspace = tf.convert_to_tensor(kspace)
  rank = kspace.shape.rank
  lowres_kspace = kspace * tf.cast(
      window_ops.expand_filter(low_pass, axis, rank), kspace.dtype)

  if smooth_phase:
    for other_axis in range(2):
      if other_axis == axis:
        continue
      size = kspace.shape[other_axis]
      sine = tf.math.sin(tf.linspace(
          tf.constant(0.0, dtype=kspace.dtype.real_dtype), np.pi, size))
      lowres_kspace *= tf.cast(
          window_ops.expand_filter(sine, other_axis, rank), kspace.dtype)

  return tf.math.angle(_ifftn(lowres_kspace))


def _homodyne(kspace, phase, high_pass, axis, **kwargs):  # pylint: disable=unused-argument
  """Partial Fourier reconstruction using homodyne detection.

  For the parameters, see `reconstruct_homodyne`.
  """
  # 1. Apply weighting function.
  # 2. Convert to image domain.
  # 3. Apply phase correction.
  # 4. Keep real part.
  weights = window_ops.expand_filter(high_pass, axis, kspace.shape.rank)
  image = _ifftn(kspace * tf.cast(weights, kspace.dtype))
  image *= tf.math.conj(_phase_modulator(phase))
  return tf.math.real(image)


def _pocs(kspace, phase, mask, max_iter, **kwargs):  # pylint: disable=unused-argument
  """Partial Fourier reconstruction using projection onto convex sets (POCS).

  Runs exactly `max_iter` iterations. Returns the magnitude image computed at
  the start of the last iteration.

  For the parameters, see `reconstruct_homodyne`.
  """
  phase_modulator = _phase_modulator(phase)

  # Type to hold state of the iteration.
  pocs_state = collections.namedtuple('pocs_state', ['kspace', 'image'])

  def stopping_criterion(i, state):  # pylint: disable=unused-argument
    return i < max_iter

  def pocs_step(i, state):
    # Project onto the set of images with the estimated phase. The magnitude
    # does not depend on the k-space shift.
    image = tf.math.abs(fft_ops.ifftn(state.kspace))
    estimate = tf.cast(image, kspace.dtype) * phase_modulator
    # Project onto data consistency set by replacing estimated k-space values
    # by measured ones.
    estimate = tf.signal.fftshift(fft_ops.fftn(estimate))
    estimate = tf.where(mask, kspace, estimate)
    return i + 1, pocs_state(kspace=estimate, image=image)

  i = tf.constant(0, dtype=tf.int32)
  state = pocs_state(kspace=kspace, image=tf.zeros_like(phase))
  _, state = tf.while_loop(stopping_criterion, pocs_step, [i, state])

  return state.image


def _least_squares(kspace, phase, mask, max_iter,
                   regularization, damping, tol, **kwargs):  # pylint: disable=unused-argument
  """Partial Fourier reconstruction using phase-constrained least squares.

  For the parameters, see `reconstruct_homodyne`.
  """
  operator = linear_operator_phase_constraint.LinearOperatorPhaseConstraint(
      phase, mask, regularization=regularization, damping=damping)

  rhs = tf.math.conj(_phase_modulator(phase)) * _ifftn(kspace)
  rhs = tf.reshape(rhs, [-1])

  result = conjugate_gradient.conjugate_gradient(
      operator, rhs, tol=tol, max_iterations=max_iter,
      real_inner_product=True)

  return tf.math.real(tf.reshape(result.x, tf.shape(phase)))


def _zerofill(kspace, **kwargs):  # pylint: disable=unused-argument
  """Partial Fourier reconstruction using zero-filling.

  For the parameters, see `reconstruct_homodyne`.
  """
  return tf.math.abs(_ifftn(kspace))


def _phase_modulator(phase):
  """Returns `exp(i * phase)`."""
  return tf.math.exp(tf.dtypes.complex(tf.zeros_like(phase), phase))


# Inverse FFT from centred k-space to the natural image layout.
_ifftn = lambda x: fft_ops.ifftn(tf.signal.ifftshift(x))
