# Copyright 2022 University College London. All Rights Reserved.
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
"""Phase-constrained partial Fourier linear operator."""

import tensorflow as tf

from tensorflow_homodyne.python.ops import fft_ops
from tensorflow_homodyne.python.util import api_util


_COMPLEX_DTYPES = {tf.float32: tf.complex64, tf.float64: tf.complex128}


@api_util.export("linalg.LinearOperatorPhaseConstraint")
class LinearOperatorPhaseConstraint(tf.linalg.LinearOperator):
  r"""Normal operator of phase-constrained partial Fourier reconstruction.

  Represents the operator

  $$A x = P^H F^H M F P x + i \lambda \mathrm{Im}(x) + \delta x$$

  acting on flattened images $x$, where:

  * $P$ multiplies by $e^{i \phi}$ for a known phase map $\phi$,
  * $F$ is the N-D discrete Fourier transform,
  * $M$ is the *k*-space sampling mask,
  * $\lambda$ (`regularization`) penalizes the imaginary part of $x$, i.e.
    the departure of the image from the phase model,
  * $\delta$ (`damping`) is a small Tikhonov term.

  Solving $A x = P^H F^H M y$ for measured *k*-space $y$ gives an image that
  is consistent with the data and close to real after phase demodulation [1].

  ```{note}
  Because of the $\mathrm{Im}(x)$ term, this operator is linear over the reals
  but not over the complex numbers. It is self-adjoint and positive definite
  with respect to the real inner product $\mathrm{Re}(u^H v)$. Use
  `conjugate_gradient` with `real_inner_product=True` to invert it.
  ```

  Args:
    phase: A real `tf.Tensor` of shape `[*spatial_shape]`. The phase map, in
      radians, in the natural (not centre-shifted) image layout. Its dtype
      determines the operator's complex dtype.
    mask: A boolean `tf.Tensor` of shape `[*spatial_shape]`. The sampling
      mask in the centred *k*-space storage layout (zero frequency at the
      centre). It is moved to the FFT layout with `ifftshift`.
    regularization: A `float`. The weight of the imaginary part penalty.
      Defaults to `1e-2`.
    damping: A `float`. The Tikhonov damping. Defaults to `1e-4`.
    is_self_adjoint: A boolean, or `None`. Defaults to `True`.
    is_positive_definite: A boolean, or `None`. Defaults to `True`.
    is_square: A boolean, or `None`. Defaults to `True`.
    name: An optional `str`. The name of this operator.

  References:
    1. Bydder, M., & Robson, M. D. (2005). Partial Fourier partially parallel
      imaging. Magnetic Resonance in Medicine, 53(6), 1393-1401.
  """
  def __init__(self,
               phase,
               mask,
               regularization=1e-2,
               damping=1e-4,
               is_self_adjoint=True,
               is_positive_definite=True,
               is_square=True,
               name='LinearOperatorPhaseConstraint'):
    parameters = dict(
        phase=phase,
        mask=mask,
        regularization=regularization,
        damping=damping,
        is_self_adjoint=is_self_adjoint,
        is_positive_definite=is_positive_definite,
        is_square=is_square,
        name=name
    )

    with tf.name_scope(name) as name:
      self._phase = tf.convert_to_tensor(phase, name="phase")
      if not self._phase.shape.is_fully_defined():
        raise ValueError(
            f"phase must have a fully defined static shape, "
            f"but got shape: {self._phase.shape}")
      if self._phase.dtype not in _COMPLEX_DTYPES:
        raise TypeError(
            f"phase must be float32 or float64, "
            f"but got dtype: {str(self._phase.dtype)}")
      dtype = _COMPLEX_DTYPES[self._phase.dtype]

      self._mask = tf.convert_to_tensor(mask, name="mask")
      if not self._mask.dtype.is_bool:
        raise TypeError(
            f"mask must be boolean, but got dtype: {str(self._mask.dtype)}")
      if self._mask.shape != self._phase.shape:
        raise ValueError(
            f"mask and phase must have the same shape, but got shapes: "
            f"{self._mask.shape}, {self._phase.shape}")

      self._image_shape = self._phase.shape
      self._axes = list(range(-self._image_shape.rank, 0))
      self._num_elements = self._image_shape.num_elements()

      self._modulator = tf.math.exp(
          tf.dtypes.complex(tf.zeros_like(self._phase), self._phase))
      self._fft_mask = tf.signal.ifftshift(tf.cast(self._mask, dtype))
      self._regularization = tf.cast(regularization, self._phase.dtype)
      self._damping = tf.cast(damping, self._phase.dtype)

      super().__init__(
          dtype=dtype,
          is_self_adjoint=is_self_adjoint,
          is_positive_definite=is_positive_definite,
          is_square=is_square,
          parameters=parameters,
          name=name)

  def _matvec(self, x, adjoint=False):
    # This operator is self-adjoint, so we can ignore the adjoint argument.
    image = tf.reshape(
        x, tf.concat([tf.shape(x)[:-1], self._image_shape.as_list()], 0))
    y = self._modulator * image
    y = fft_ops.fftn(y, axes=self._axes)
    y = self._fft_mask * y
    y = fft_ops.ifftn(y, axes=self._axes)
    y = tf.math.conj(self._modulator) * y
    y += tf.dtypes.complex(
        tf.zeros_like(tf.math.imag(image)),
        self._regularization * tf.math.imag(image))
    y += tf.cast(self._damping, self.dtype) * image
    return tf.reshape(y, tf.shape(x))

  def _matmul(self, x, adjoint=False, adjoint_arg=False):
    # Columns of `x` are independent images.
    if adjoint_arg:
      x = tf.linalg.adjoint(x)
    y = self._matvec(tf.linalg.matrix_transpose(x), adjoint=adjoint)
    return tf.linalg.matrix_transpose(y)

  def _shape(self):
    return tf.TensorShape([self._num_elements, self._num_elements])

  def _shape_tensor(self):
    return tf.constant([self._num_elements, self._num_elements],
                       dtype=tf.int32)

  @property
  def phase(self):
    return self._phase

  @property
  def mask(self):
    return self._mask

  @property
  def regularization(self):
    return self._regularization

  @property
  def damping(self):
    return self._damping

  @property
  def image_shape(self):
    return self._image_shape

  @property
  def _composite_tensor_fields(self):
    return ('phase', 'mask', 'regularization', 'damping')
